# amc/responses.py

from rest_framework import status
from rest_framework.response import Response


def success_response(data=None, message=None, status_code=status.HTTP_200_OK, pagination=None, **extra):
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    if pagination is not None:
        body["pagination"] = pagination
    body.update(extra)
    return Response(body, status=status_code)


def created_response(data=None, message=None):
    return success_response(data, message, status_code=status.HTTP_201_CREATED)


def error_response(error, status_code=status.HTTP_400_BAD_REQUEST, **extra):
    body = {"success": False, "error": error}
    body.update(extra)
    return Response(body, status=status_code)
