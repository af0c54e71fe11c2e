from typing import Optional

from freightdesk.core.errors import NotFoundError


def check_not_found(item, resource_name: str = "Resource", resource_id: Optional[int] = None) -> None:

    if not item:
        if resource_id is not None:
            raise NotFoundError(f"{resource_name} with id {resource_id} not found")
        raise NotFoundError(f"{resource_name} not found")
