"""
JSON codec for vendor documents.

Each document is stored as a single hash field value. Encoding is
deterministic (sorted keys, compact separators) so identical documents
always produce identical bytes. Both directions validate against the
vendor's pydantic model: a document that could not be read back is never
written, and a stored value with missing required keys, unexpected keys,
wrong types or malformed JSON raises DecodeFailed. Nothing is coerced.
"""
import json
from typing import Any, Dict, Type, Union

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from vulnstore.errors import DecodeFailed, EncodeFailed
from .documents import DebianCVE, MicrosoftCVE, RedhatCVE, UbuntuCVE
from .vendor import Vendor

MODELS: Dict[Vendor, Type[BaseModel]] = {
    Vendor.REDHAT: RedhatCVE,
    Vendor.DEBIAN: DebianCVE,
    Vendor.UBUNTU: UbuntuCVE,
    Vendor.MICROSOFT: MicrosoftCVE,
}


def model_for(vendor: Vendor) -> Type[BaseModel]:
    """Return the document model stored under a vendor's field."""
    return MODELS[vendor]


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
        for err in error.errors()
    )


def encode(document: Any) -> str:
    """
    Serialize a vendor document to canonical JSON.

    The payload is validated against the document's model before it is
    returned, so anything encode() accepts, decode() reads back.

    Raises:
        EncodeFailed: if the object is not a document, holds values of the
            wrong type, or holds text that is not valid UTF-8
    """
    if not isinstance(document, BaseModel):
        raise EncodeFailed(f"Failed to marshal json. not a document: {type(document).__name__}")
    try:
        payload = json.dumps(
            document.model_dump(warnings=False),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
        # Lone surrogates survive json.dumps but not the wire
        payload.encode("utf-8")
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise EncodeFailed(f"Failed to marshal json. err: {e}") from e

    try:
        type(document).model_validate_json(payload)
    except ValidationError as e:
        raise EncodeFailed(
            f"Failed to marshal json. invalid {type(document).__name__}: {_describe(e)}"
        ) from e
    return payload


def decode(vendor: Vendor, payload: Union[str, bytes]) -> Any:
    """
    Deserialize a stored value into the vendor's document model.

    Args:
        vendor: Vendor whose field the payload was read from
        payload: Stored JSON text

    Returns:
        Instance of model_for(vendor)

    Raises:
        DecodeFailed: on malformed JSON or a payload that does not match the model
    """
    try:
        return model_for(vendor).model_validate_json(payload)
    except ValidationError as e:
        raise DecodeFailed(f"Failed to unmarshal {vendor.field} json. {_describe(e)}") from e
    except TypeError as e:
        raise DecodeFailed(f"Failed to unmarshal {vendor.field} json. err: {e}") from e
