from task_resolver.adapters.factory import AdapterFactory, Adapters

__all__ = ["AdapterFactory", "Adapters"]
