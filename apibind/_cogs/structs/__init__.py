"""
All the structures used in the library: raw wire documents, their shapes.

Structs are the data containers: they have no behaviour except for
the shape detection and conversion. They do not depend on the resources,
the collections, or the connections -- only on each other.
"""
