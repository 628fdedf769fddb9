"""Field codec: wire values <-> table display values."""

from .fields import (
    DEFAULT_ROLE_ID,
    IDENTIFIER_KEYS,
    NOT_AVAILABLE,
    ROLES,
    UNKNOWN_ROLE,
    decode_date,
    decode_role,
    decode_score,
    decode_sex,
    encode_date_from_display,
    encode_role_from_label,
    encode_score_from_display,
    encode_sex_from_label,
    extract_identifier,
    parse_number,
)

__all__ = [
    "DEFAULT_ROLE_ID",
    "IDENTIFIER_KEYS",
    "NOT_AVAILABLE",
    "ROLES",
    "UNKNOWN_ROLE",
    "decode_date",
    "decode_role",
    "decode_score",
    "decode_sex",
    "encode_date_from_display",
    "encode_role_from_label",
    "encode_score_from_display",
    "encode_sex_from_label",
    "extract_identifier",
    "parse_number",
]
