"""Layout engine: geometry, themes, row renderers, pagination and assembly."""
