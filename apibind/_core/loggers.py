"""
Per-resource loggers and the log formatting.

Every resource has its own logger (an adapter), which carries the resource's
reference (its type and id) in the log records' extras. All the requests made
on behalf of a resource are logged through that logger, so the log lines can
be attributed to the specific resources: either with a ``[type/id]`` prefix
in the text logs, or with a structured reference in the JSON logs.

The library never configures the logging on its own. The applications
(or the CLI, see :mod:`apibind.cli`) can use :func:`configure` for that.
"""
import copy
import enum
import logging
from typing import TYPE_CHECKING, Any, MutableMapping, Optional, TextIO, Tuple

import pythonjsonlogger.core
import pythonjsonlogger.json

from apibind._cogs.helpers import typedefs

if TYPE_CHECKING:
    from apibind._core import resources

DEFAULT_JSON_REFKEY = 'resource'
""" A key for resource references in JSON logs, as seen by the log parsers. """


class LogFormat(enum.Enum):
    """ Log formats, as specified on CLI. """
    PLAIN = '%(message)s'
    FULL = '[%(asctime)s] %(name)-20.20s [%(levelname)-8.8s] %(message)s'
    JSON = '-json-'  # not used for formatting, only for detection


class ResourceFormatter(logging.Formatter):
    pass


class ResourceTextFormatter(ResourceFormatter, logging.Formatter):
    pass


class ResourceJsonFormatter(ResourceFormatter, pythonjsonlogger.json.JsonFormatter):
    def __init__(
            self,
            *args: Any,
            refkey: Optional[str] = None,
            **kwargs: Any,
    ) -> None:
        # Avoid type checking, as the args are not in the parent consructor.
        reserved_attrs = kwargs.pop('reserved_attrs', pythonjsonlogger.core.RESERVED_ATTRS)
        reserved_attrs = set(reserved_attrs)
        reserved_attrs |= {'api_ref'}
        kwargs.update(reserved_attrs=reserved_attrs)
        kwargs.setdefault('timestamp', True)
        super().__init__(*args, **kwargs)
        self._refkey: str = refkey or DEFAULT_JSON_REFKEY

    def add_fields(
            self,
            log_record: MutableMapping[str, Any],
            record: logging.LogRecord,
            message_dict: MutableMapping[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        if self._refkey and hasattr(record, 'api_ref'):
            ref = getattr(record, 'api_ref')
            log_record[self._refkey] = ref

        if 'severity' not in log_record:
            log_record['severity'] = (
                "debug" if record.levelno <= logging.DEBUG else
                "info" if record.levelno <= logging.INFO else
                "warn" if record.levelno <= logging.WARNING else
                "error" if record.levelno <= logging.ERROR else
                "fatal")


class ResourcePrefixingMixin(ResourceFormatter):
    def format(self, record: logging.LogRecord) -> str:
        if hasattr(record, 'api_ref'):
            ref = getattr(record, 'api_ref')
            type = ref.get('type', '')
            id = ref.get('id')
            prefix = f"[{type}/{id}]" if id is not None else f"[{type}]"
            record = copy.copy(record)  # shallow
            record.msg = f"{prefix} {record.msg}"
        return super().format(record)


class ResourcePrefixingTextFormatter(ResourcePrefixingMixin, ResourceTextFormatter):
    pass


class ResourcePrefixingJsonFormatter(ResourcePrefixingMixin, ResourceJsonFormatter):
    pass


class ResourceLogger(typedefs.LoggerAdapter):
    """
    A logger/adapter to carry the resource identifiers for formatting.

    The reference is taken from the resource at the moment of logging,
    not at the moment of the adapter's creation: the resources get their ids
    only after they are created on the server, and lose them when deleted.
    """

    def __init__(self, *, resource: "resources.Resource") -> None:
        super().__init__(logger, {})
        self._resource = resource

    def process(
            self,
            msg: str,
            kwargs: MutableMapping[str, Any],
    ) -> Tuple[str, MutableMapping[str, Any]]:
        # Native logging overwrites the message's extra with the adapter's extra.
        # We merge them, so that both message's & adapter's extras are available.
        ref = dict(type=self._resource.type, id=self._resource.id)
        kwargs["extra"] = {**(self.extra or {}), 'api_ref': ref, **kwargs.get('extra', {})}
        return msg, kwargs


logger = logging.getLogger('apibind.resources')


# Used to identify and remove our own handlers on repeated configuration (e.g. by every CLI run),
# since the previous handlers can stream into the already closed streams.
if TYPE_CHECKING:
    class _ApiBindStreamHandler(logging.StreamHandler[TextIO]):
        pass
else:
    class _ApiBindStreamHandler(logging.StreamHandler):
        pass


def configure(
        debug: Optional[bool] = None,
        verbose: Optional[bool] = None,
        quiet: Optional[bool] = None,
        log_format: LogFormat = LogFormat.FULL,
        log_prefix: Optional[bool] = False,
        log_refkey: Optional[str] = None,
) -> None:
    log_level = 'DEBUG' if debug or verbose else 'WARNING' if quiet else 'INFO'
    formatter = make_formatter(log_format=log_format, log_prefix=log_prefix, log_refkey=log_refkey)
    handler = _ApiBindStreamHandler()
    handler.setFormatter(formatter)
    logger = logging.getLogger()
    logger.handlers[:] = [h for h in logger.handlers if not isinstance(h, _ApiBindStreamHandler)]
    logger.addHandler(handler)
    logger.setLevel(log_level)

    # Prevent the low-level logging unless in the debug mode. Keep only the library's messages.
    # For no-propagation loggers, add a dummy null handler to prevent printing the messages.
    for name in ['asyncio', 'aiohttp']:
        logger = logging.getLogger(name)
        logger.propagate = bool(debug)
        if not debug:
            logger.handlers[:] = [logging.NullHandler()]


def make_formatter(
        log_format: LogFormat = LogFormat.FULL,
        log_prefix: Optional[bool] = False,
        log_refkey: Optional[str] = None,
) -> ResourceFormatter:
    log_prefix = log_prefix if log_prefix is not None else bool(log_format is not LogFormat.JSON)
    if log_format is LogFormat.JSON:
        if log_prefix:
            return ResourcePrefixingJsonFormatter(refkey=log_refkey)
        else:
            return ResourceJsonFormatter(refkey=log_refkey)
    elif isinstance(log_format, LogFormat):
        if log_prefix:
            return ResourcePrefixingTextFormatter(log_format.value)
        else:
            return ResourceTextFormatter(log_format.value)
    elif isinstance(log_format, str):
        if log_prefix:
            return ResourcePrefixingTextFormatter(log_format)
        else:
            return ResourceTextFormatter(log_format)
    else:
        raise ValueError(f"Unsupported log format: {log_format!r}")
