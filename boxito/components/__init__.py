"""
Component registry for Boxito
This module manages all page components and their registration.
"""
from boxito.config.settings import BoxitoConfig


class ComponentRegistry:
    """Registry for page components"""

    def __init__(self):
        self.components = {}

    def register_component(self, name, component_class):
        """Register a page component"""
        self.components[name] = component_class

    def get_component(self, name):
        """Get a registered component"""
        return self.components.get(name)

    def get_all_components(self):
        """Get all registered components"""
        return self.components

    def navigation(self):
        """Menu entries for the registered pages, in configuration order"""
        return [
            {
                'name': name,
                'label': resource['name'],
                'endpoint': f'{name}.index'
            }
            for name, resource in BoxitoConfig.RESOURCES.items()
            if name in self.components
        ]


# Global registry instance
registry = ComponentRegistry()


def register_component(name):
    """Decorator for registering components"""
    def decorator(component_class):
        registry.register_component(name, component_class)
        return component_class
    return decorator


__all__ = ['ComponentRegistry', 'registry', 'register_component']
