"""Service layer.

Services are framework agnostic: they receive a ``session_factory`` and ports
(token provider, blob store) and raise errors from
:mod:`filevault.services._shared.errors`. Import them from their subpackages,
e.g. ``from filevault.services.files import FileService``.
"""
