from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Optional, Union

from ordering_client.errors import ValidationError
from ordering_client.models.restaurant_form import RestaurantForm, parse_restaurant_form
from ordering_client.models.service_models import Restaurant
from ordering_client.notifications import Notifier
from ordering_client.services.base import ServiceResult


FetchRestaurant = Callable[[], Awaitable[ServiceResult]]
SaveRestaurant = Callable[[RestaurantForm], Awaitable[ServiceResult]]


class RestaurantManager:
    """The operator's own restaurant: load it, then create or update it."""

    def __init__(
        self,
        fetch_restaurant: FetchRestaurant,
        create_restaurant: SaveRestaurant,
        update_restaurant: SaveRestaurant,
        notifier: Notifier,
    ) -> None:
        self._fetch = fetch_restaurant
        self._create = create_restaurant
        self._update = update_restaurant
        self.notifier = notifier
        self.restaurant: Optional[Restaurant] = None
        self.is_pending = False

    @property
    def is_editing(self) -> bool:
        return self.restaurant is not None

    async def load(self) -> Optional[Restaurant]:
        result = await self._fetch()
        if result.success:
            self.restaurant = result.data
        elif result.status_code != 404:
            # 404 just means the operator has not created one yet
            self.notifier.error("Failed to get restaurant")
        return self.restaurant

    async def save(self, form: Union[RestaurantForm, Dict[str, Any]]) -> Optional[Restaurant]:
        try:
            if not isinstance(form, RestaurantForm):
                form = parse_restaurant_form(form)
        except ValidationError as e:
            self.notifier.error(str(e))
            return None

        editing = self.is_editing
        self.is_pending = True
        try:
            result = await (self._update(form) if editing else self._create(form))
        finally:
            self.is_pending = False

        if not result.success:
            self.notifier.error("Unable to update restaurant" if editing else "Unable to create restaurant")
            return None

        self.restaurant = result.data
        self.notifier.success("Restaurant updated!" if editing else "Restaurant created!")
        return self.restaurant
