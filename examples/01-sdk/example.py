"""
A minimal SDK for a real {json:api} server, and its usage.

Run with an API token: ``TRANSIFEX_TOKEN=... python example.py``.
"""
import asyncio
import os

import apibind


class TransifexApi(apibind.Connection):
    HOST = 'https://rest.api.transifex.com'


@TransifexApi.register
class Organization(apibind.Resource):
    TYPE = 'organizations'


@TransifexApi.register
class Project(apibind.Resource):
    TYPE = 'projects'


async def main() -> None:
    apibind.configure(verbose=True, log_prefix=True)
    async with TransifexApi(auth=os.environ['TRANSIFEX_TOKEN']) as api:
        async for organization in api.Organization.list().all():
            print(f"{organization.id}: {organization.get('name')}")
            projects = api.Project.filter(organization=organization).sort('name')
            async for project in projects.all():
                print(f"    {project.id}: {project.get('name')}")


if __name__ == '__main__':
    asyncio.run(main())
