# --------------------------------------------------
# schemas.py
# --------------------------------------------------
# Request / response models of the demo endpoints.
#
#   - EchoMessage: body of POST /echo
#   - Identity:    response of GET /whoami
# --------------------------------------------------

from pydantic import BaseModel, Field


class EchoMessage(BaseModel):
    message: str = Field(min_length=1, max_length=4096)


class Identity(BaseModel):
    """Claims read from the caller's bearer token ("" when absent)."""

    sub: str = ""
    company: str = ""
