from oobmultipart.boundary import random_boundary
from oobmultipart.encoder import EncoderState, MultipartEncoder
from oobmultipart.errors import MissingProviderError, NoMoreParts, OOBMultipartError
from oobmultipart.form import FormPartSource, encode_multipart
from oobmultipart.headers import PartHeaders
from oobmultipart.part import Part
from oobmultipart.source import (
    CallbackPartSource,
    IterablePartSource,
    PartSource,
    as_part_source,
)
from oobmultipart.streaming import MultipartStream

__all__ = [
    "MultipartEncoder",
    "EncoderState",
    "MultipartStream",
    "Part",
    "PartHeaders",
    "PartSource",
    "CallbackPartSource",
    "IterablePartSource",
    "FormPartSource",
    "as_part_source",
    "encode_multipart",
    "random_boundary",
    "OOBMultipartError",
    "MissingProviderError",
    "NoMoreParts",
]
