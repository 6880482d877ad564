"""
General-purpose helpers not related to the {json:api} binding itself
(neither to the resources nor to the collections nor to the wire structs),
which are used to prepare and control the runtime environment.

As a rule of thumb, helpers MUST be abstracted from the library to such an
extent that they could be extracted as reusable libraries. If they implement
concepts of the binding, they are not "helpers" (consider structs or core).
"""
