from django import template

from ..shop_utils import format_rupees

register = template.Library()


@register.filter
def rupees(value):
    return format_rupees(value)
