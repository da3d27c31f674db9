"""Result envelope of the CRUD wire protocol.

Every response body and every stream frame is a JSON object carrying exactly
one of ``"error"`` or ``"result"``. Request bodies travel wrapped as
``{"params": ...}``.
"""

from typing import Any

from .core import ProtocolError, ServerError
from .json_codec import dumps


def result_of_json(json_value: Any) -> Any:
    """Unwrap an envelope, returning the success payload unchanged.

    Raises:
        ProtocolError: If the value is not an object, or carries neither or both fields
        ServerError: If the envelope carries an error payload
    """
    if not isinstance(json_value, dict):
        raise ProtocolError(f"expected a result envelope, got {dumps(json_value)}")

    has_error = "error" in json_value
    has_result = "result" in json_value

    if has_error and has_result:
        raise ProtocolError("ambiguous result/error")
    if has_error:
        error = json_value["error"]
        raise ServerError(error if isinstance(error, str) else dumps(error))
    if has_result:
        return json_value["result"]
    raise ProtocolError("missing result/error")


def params(body: Any) -> dict[str, Any]:
    """Wrap a request body in the parameters envelope."""
    return {"params": body}
