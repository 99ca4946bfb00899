from django import template

register = template.Library()


@register.filter
def exponential(value, digits=5):
    """Format a number in scientific notation (e.g. 3.83183e-02)"""
    try:
        return f"{float(value):.{int(digits)}e}"
    except (TypeError, ValueError):
        return ''


@register.filter
def fixed(value, digits=2):
    """Format a number with a fixed number of decimals"""
    try:
        return f"{float(value):.{int(digits)}f}"
    except (TypeError, ValueError):
        return ''


@register.filter
def sigfigs(value, digits=5):
    """Format a number to a number of significant figures, keeping trailing zeros"""
    try:
        return f"{float(value):#.{int(digits)}g}".rstrip('.')
    except (TypeError, ValueError):
        return ''


@register.filter
def format_isotope(value):
    """Display label for an isotope value"""
    if not value:
        return '-'
    if value == 'custom':
        return 'Custom'
    return value
