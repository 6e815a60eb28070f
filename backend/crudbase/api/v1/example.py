"""
Example endpoint demonstrating the response envelope convention.

Every handler returns the base envelope via respond() and documents its
payload with a response model extending BaseResponse.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from crudbase.api.responses import respond
from crudbase.schemas.response import ExampleTestResponse


TAG = "Example v1"

router = APIRouter(tags=[TAG])


@router.get(
    "/test",
    response_model=ExampleTestResponse,
    status_code=status.HTTP_200_OK,
    summary="Test",
    description="Returns a fixed payload wrapped in the base response envelope",
    response_description="Test response",
)
async def example_test() -> JSONResponse:
    """
    Test endpoint.

    Example response:
        {
            "success": true,
            "message": null,
            "data": "Ok."
        }
    """
    return respond(data="Ok.")
