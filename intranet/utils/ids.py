from typing import Union

from beanie import PydanticObjectId
from bson import ObjectId
from bson.errors import InvalidId

from intranet.errors import NotFoundError


def parse_object_id(value: Union[str, ObjectId], not_found_message: str) -> PydanticObjectId:
    """Turn a path/body id into an ObjectId; malformed ids read as missing records"""
    if isinstance(value, ObjectId):
        return PydanticObjectId(value)
    try:
        return PydanticObjectId(value)
    except (InvalidId, TypeError):
        raise NotFoundError(not_found_message)
