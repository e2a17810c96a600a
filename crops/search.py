"""
Crop search gateway.

The full-text index lives outside this application. Crops talk to it
through a small contract:

- index(crop): add or refresh an approved crop
- deindex(crop_id): drop a crop from the index
- search(query): ids of approved crops, best match first

Two gateways are provided. DatabaseSearchGateway answers searches
straight from the crop tables and needs no index; it is the default for
development and tests. ElasticsearchGateway keeps an Elasticsearch
index in sync over HTTP.

The gateway in use is chosen by settings.CROPS_SEARCH_GATEWAY.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from django.conf import settings
from django.db.models import Case, IntegerField, Q, Value, When
from django.db.models.functions import Lower
from django.utils.module_loading import import_string

from crops.exceptions import SearchGatewayError
from crops.models import ApprovalStatus, Crop

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 50


class SearchGateway:
    """Interface every crop search backend implements."""

    def index(self, crop: Crop) -> None:
        raise NotImplementedError

    def deindex(self, crop_id: int) -> None:
        raise NotImplementedError

    def search(self, query: str, limit: Optional[int] = None) -> List[int]:
        raise NotImplementedError


class DatabaseSearchGateway(SearchGateway):
    """
    Search approved crops with case-insensitive substring matching.

    Matches on the crop name and on its scientific and alternate names.
    Exact name matches rank first, then names starting with the query,
    then everything else alphabetically. There is no index to maintain.
    """

    def index(self, crop: Crop) -> None:
        pass

    def deindex(self, crop_id: int) -> None:
        pass

    def search(self, query: str, limit: Optional[int] = None) -> List[int]:
        query = (query or "").strip()
        if not query:
            return []

        matches = (
            Crop.objects.approved()
            .filter(
                Q(name__icontains=query)
                | Q(scientific_names__name__icontains=query)
                | Q(alternate_names__name__icontains=query)
            )
            .annotate(
                rank=Case(
                    When(name__iexact=query, then=Value(0)),
                    When(name__istartswith=query, then=Value(1)),
                    When(name__icontains=query, then=Value(2)),
                    default=Value(3),
                    output_field=IntegerField(),
                ),
                lower_name=Lower("name"),
            )
            .order_by("rank", "lower_name", "id")
            .values_list("id", flat=True)
            .distinct()
        )
        return list(matches[: limit or DEFAULT_SEARCH_LIMIT])


def crop_document(crop: Crop) -> Dict[str, Any]:
    """Build the search document for a crop."""
    return {
        "id": crop.pk,
        "name": crop.name,
        "slug": crop.slug,
        "approval_status": crop.approval_status,
        "scientific_names": list(crop.scientific_names.values_list("name", flat=True)),
        "alternate_names": list(crop.alternate_names.values_list("name", flat=True)),
        "created_at": crop.created_at.isoformat() if crop.created_at else None,
    }


class ElasticsearchGateway(SearchGateway):
    """
    Keep crops in an Elasticsearch index.

    Only approved crops are written to the index, and searches filter on
    approval status as well, so a stale document for a crop that has
    since been rejected is never returned.
    """

    def __init__(self, base_url: str = None, index_name: str = None, timeout: float = None):
        self.base_url = (base_url or settings.CROPS_SEARCH_URL).rstrip("/")
        self.index_name = index_name or settings.CROPS_SEARCH_INDEX
        self.timeout = timeout if timeout is not None else settings.CROPS_SEARCH_TIMEOUT

    def _url(self, *parts) -> str:
        return "/".join([self.base_url, self.index_name, *[str(part) for part in parts]])

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise SearchGatewayError(f"Search index timeout after {self.timeout}s: {e}") from e
        except httpx.HTTPError as e:
            raise SearchGatewayError(f"Search index connection error: {e}") from e
        return response

    def index(self, crop: Crop) -> None:
        if not crop.is_approved:
            logger.debug(f"Not indexing crop {crop.pk}: status is {crop.approval_status}")
            return
        response = self._request("PUT", self._url("_doc", crop.pk), json=crop_document(crop))
        if response.status_code not in (200, 201):
            raise SearchGatewayError(
                f"Indexing crop {crop.pk} failed with status {response.status_code}: "
                f"{response.text[:200]}"
            )
        logger.debug(f"Indexed crop {crop.pk} ({crop.name})")

    def deindex(self, crop_id: int) -> None:
        response = self._request("DELETE", self._url("_doc", crop_id))
        # 404 means the crop was never indexed
        if response.status_code not in (200, 404):
            raise SearchGatewayError(
                f"Removing crop {crop_id} from index failed with status "
                f"{response.status_code}: {response.text[:200]}"
            )
        logger.debug(f"Removed crop {crop_id} from search index")

    def search(self, query: str, limit: Optional[int] = None) -> List[int]:
        query = (query or "").strip()
        if not query:
            return []

        payload = {
            "size": limit or DEFAULT_SEARCH_LIMIT,
            "_source": False,
            "query": {
                "bool": {
                    "filter": [
                        {"term": {"approval_status": ApprovalStatus.APPROVED.value}},
                    ],
                    "should": [
                        {"match_phrase_prefix": {"name": {"query": query}}},
                        {
                            "multi_match": {
                                "query": query,
                                "fields": ["name^3", "alternate_names", "scientific_names"],
                                "fuzziness": "AUTO",
                            }
                        },
                    ],
                    "minimum_should_match": 1,
                }
            },
        }
        response = self._request("POST", self._url("_search"), json=payload)
        if response.status_code != 200:
            raise SearchGatewayError(
                f"Search for {query!r} failed with status {response.status_code}: "
                f"{response.text[:200]}"
            )

        try:
            hits = response.json()["hits"]["hits"]
            return [int(hit["_id"]) for hit in hits]
        except (ValueError, KeyError, TypeError) as e:
            raise SearchGatewayError(f"Unexpected search response: {e}") from e


def get_search_gateway() -> SearchGateway:
    """Instantiate the gateway named by settings.CROPS_SEARCH_GATEWAY."""
    return import_string(settings.CROPS_SEARCH_GATEWAY)()


def search_crops(query: str, queryset=None, limit: Optional[int] = None) -> List[Crop]:
    """
    Approved crops matching query, in the order the gateway ranked them.

    Ids returned by the gateway for crops that are no longer approved
    (or no longer exist) are dropped.
    """
    ids = get_search_gateway().search(query, limit=limit)
    if not ids:
        return []
    crops = queryset if queryset is not None else Crop.objects.all()
    found = {crop.pk: crop for crop in crops.approved().filter(pk__in=ids)}
    return [found[crop_id] for crop_id in ids if crop_id in found]
