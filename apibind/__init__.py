"""
The main apibind module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the library's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from apibind._cogs.clients.auth import (
    AuthProvider,
    BearerAuth,
)
from apibind._cogs.clients.errors import (
    JsonApiError,
    JsonApiUnauthorizedError,
    JsonApiForbiddenError,
    JsonApiNotFoundError,
    JsonApiConflictError,
)
from apibind._cogs.clients.transport import (
    Response,
    Transport,
    AiohttpTransport,
)
from apibind._cogs.configs.configuration import (
    ConnectionSettings,
    NetworkingSettings,
    NegotiationSettings,
)
from apibind._cogs.helpers.typedefs import (
    Logger,
)
from apibind._cogs.helpers.versions import (
    version as __version__,
)
from apibind._cogs.structs.documents import (
    RawIdentifier,
    RawLinks,
    RawRelationship,
    RawResource,
    RawError,
    RawDocument,
)
from apibind._core.collections import (
    Collection,
)
from apibind._core.connections import (
    Connection,
)
from apibind._core.errors import (
    ApiBindError,
    TypeMismatchError,
    UnknownRelationshipError,
    UnknownFieldError,
    MissingRelatedLinkError,
    NoRedirectError,
    DoesNotExist,
    MultipleResults,
)
from apibind._core.loggers import (
    LogFormat,
    configure,
)
from apibind._core.registries import (
    BoundType,
)
from apibind._core.relationships import (
    Identifier,
    RelationshipEnvelope,
    PluralRelationship,
    RelationshipSlot,
)
from apibind._core.resources import (
    Resource,
)

__all__ = [
    'AuthProvider',
    'BearerAuth',
    'JsonApiError',
    'JsonApiUnauthorizedError',
    'JsonApiForbiddenError',
    'JsonApiNotFoundError',
    'JsonApiConflictError',
    'Response',
    'Transport',
    'AiohttpTransport',
    'ConnectionSettings',
    'NetworkingSettings',
    'NegotiationSettings',
    'Logger',
    'RawIdentifier',
    'RawLinks',
    'RawRelationship',
    'RawResource',
    'RawError',
    'RawDocument',
    'Collection',
    'Connection',
    'ApiBindError',
    'TypeMismatchError',
    'UnknownRelationshipError',
    'UnknownFieldError',
    'MissingRelatedLinkError',
    'NoRedirectError',
    'DoesNotExist',
    'MultipleResults',
    'LogFormat',
    'configure',
    'BoundType',
    'Identifier',
    'RelationshipEnvelope',
    'PluralRelationship',
    'RelationshipSlot',
    'Resource',
]
