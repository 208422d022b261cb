from diweave._internal.injector import Injector
from diweave._internal.resolver_protocol import InjectParameter, ObjectResolver

__all__ = ["InjectParameter", "Injector", "ObjectResolver"]
