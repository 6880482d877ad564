"""
Uploading a file with a form, and downloading the result via a redirect.

The server responds to the upload with a job resource, which redirects to
the resulting file once the job is done.
"""
import asyncio
import os

import aiohttp

import apibind


class TransifexApi(apibind.Connection):
    HOST = 'https://rest.api.transifex.com'


@TransifexApi.register
class ResourceStringsAsyncUpload(apibind.Resource):
    TYPE = 'resource_strings_async_uploads'


@TransifexApi.register
class ResourceTranslationsAsyncDownload(apibind.Resource):
    TYPE = 'resource_translations_async_downloads'


async def main() -> None:
    apibind.configure(verbose=True)
    async with TransifexApi(auth=os.environ['TRANSIFEX_TOKEN']) as api:
        form = aiohttp.FormData()
        form.add_field('resource', os.environ['TRANSIFEX_RESOURCE'])
        form.add_field('content', b'hello: world\n', filename='strings.yaml')
        upload = await api.ResourceStringsAsyncUpload.create_with_form(data=form)
        print(f"Uploaded: {upload.id} ({upload.get('status')})")

        download = await api.ResourceTranslationsAsyncDownload.create(
            resource={'type': 'resources', 'id': os.environ['TRANSIFEX_RESOURCE']},
            language={'type': 'languages', 'id': 'l:fr'},
        )
        while not download.redirect:
            await asyncio.sleep(1)
            await download.reload()
        response = await download.follow()
        print(response.data)


if __name__ == '__main__':
    asyncio.run(main())
