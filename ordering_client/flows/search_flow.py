"""Search / filter / sort / pagination state for the restaurant search page.

Every change to what the result set *is* (query text, cuisine filter, sort
order) sends the cursor back to page 1. Changing the page touches nothing
else. Results are never cached here; whoever owns the remote binding fetches
again after each transition.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class SortOption(str, Enum):
    BEST_MATCH = "bestMatch"
    PRICE_LOW_TO_HIGH = "priceLowToHigh"
    PRICE_HIGH_TO_LOW = "priceHighToLow"
    DELIVERY_PRICE = "deliveryPrice"
    ESTIMATED_DELIVERY_TIME = "estimatedDeliveryTime"
    LAST_UPDATED = "lastUpdated"


class SearchState(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: str = ""
    page: int = Field(default=1, ge=1)
    selected_cuisines: List[str] = Field(default_factory=list)
    sort_option: str = SortOption.BEST_MATCH.value

    def to_query_params(self) -> Dict[str, Any]:
        return {
            "searchQuery": self.query,
            "selectedCuisines": ",".join(self.selected_cuisines),
            "sortOption": self.sort_option,
            "page": self.page,
        }


def _sort_value(option: Union[SortOption, str]) -> str:
    return option.value if isinstance(option, SortOption) else str(option)


def set_query(state: SearchState, query: str) -> SearchState:
    return state.model_copy(update={"query": query, "page": 1})


def set_cuisines(state: SearchState, cuisines: Iterable[str]) -> SearchState:
    # set semantics, first-selected order kept for a stable query string
    unique = list(dict.fromkeys(cuisines))
    return state.model_copy(update={"selected_cuisines": unique, "page": 1})


def set_sort(state: SearchState, option: Union[SortOption, str]) -> SearchState:
    return state.model_copy(update={"sort_option": _sort_value(option), "page": 1})


def set_page(state: SearchState, page: int) -> SearchState:
    # bounded by the caller from the pagination metadata of the last response
    return state.model_copy(update={"page": page})


def reset_query(state: SearchState) -> SearchState:
    return state.model_copy(update={"query": ""})


class SearchQueryController:
    def __init__(self, state: Optional[SearchState] = None) -> None:
        self.state = state or SearchState()

    def enter(self) -> SearchState:
        self.state = SearchState()
        return self.state

    def set_query(self, query: str) -> SearchState:
        self.state = set_query(self.state, query)
        return self.state

    def set_cuisines(self, cuisines: Iterable[str]) -> SearchState:
        self.state = set_cuisines(self.state, cuisines)
        return self.state

    def set_sort(self, option: Union[SortOption, str]) -> SearchState:
        self.state = set_sort(self.state, option)
        return self.state

    def set_page(self, page: int) -> SearchState:
        self.state = set_page(self.state, page)
        return self.state

    def reset_query(self) -> SearchState:
        self.state = reset_query(self.state)
        return self.state
