"""Request and response values."""

from wren.http.cookies import SetCookie, parse_cookies
from wren.http.forms import FormData, UploadFile, parse_form_data
from wren.http.headers import Headers
from wren.http.query import QueryParams
from wren.http.request import Request
from wren.http.response import Redirect, Response

__all__ = [
    "FormData",
    "Headers",
    "QueryParams",
    "Redirect",
    "Request",
    "Response",
    "SetCookie",
    "UploadFile",
    "parse_cookies",
    "parse_form_data",
]
