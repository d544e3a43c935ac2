from .display import DisplayMode, render_display

__all__ = ['DisplayMode', 'render_display']
