"""
Tests for crop search: the gateways, the index tasks, and the signals
that keep the index in step with moderation.
"""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from crops.exceptions import SearchGatewayError
from crops.models import ApprovalStatus, Crop, RejectionReason
from crops.moderation import approve, reject
from crops.search import (
    DatabaseSearchGateway,
    ElasticsearchGateway,
    crop_document,
    get_search_gateway,
    search_crops,
)
from crops.tasks import deindex_crop, index_crop, reindex_approved_crops


class TestDatabaseSearchGateway:
    """Searching approved crops straight from the database."""

    @pytest.fixture
    def gateway(self):
        return DatabaseSearchGateway()

    def test_finds_exact_match(self, gateway, tomato, maize):
        assert gateway.search("tomato") == [tomato.pk]

    def test_finds_partial_match(self, gateway, tomato):
        assert gateway.search("mat") == [tomato.pk]

    def test_is_case_insensitive(self, gateway, tomato):
        assert gateway.search("TOMATO") == [tomato.pk]

    def test_finds_by_scientific_name(self, gateway, tomato):
        tomato.add_scientific_names_from_csv("Solanum lycopersicum")
        assert gateway.search("lycopersicum") == [tomato.pk]

    def test_finds_by_alternate_name(self, gateway, tomato):
        tomato.add_alternate_names_from_csv("love apple, pomodoro")
        assert gateway.search("pomodoro") == [tomato.pk]

    def test_does_not_repeat_crops_matched_several_ways(self, gateway, tomato):
        tomato.add_alternate_names_from_csv("tomato plant, tomate")
        assert gateway.search("tomat") == [tomato.pk]

    def test_exact_matches_rank_first(self, gateway, make_crop):
        cherry = make_crop(name="cherry tomato")
        tomatoes = make_crop(name="tomatoes")
        tomato = make_crop(name="tomato")
        assert gateway.search("tomato") == [tomato.pk, tomatoes.pk, cherry.pk]

    def test_name_matches_rank_before_other_names(self, gateway, tomato, make_crop):
        tomato.add_alternate_names_from_csv("love apple")
        crab_apple = make_crop(name="crab apple")
        apple = make_crop(name="apple")
        assert gateway.search("apple") == [apple.pk, crab_apple.pk, tomato.pk]

    def test_excludes_pending_and_rejected(self, gateway, tomato, make_crop):
        make_crop(name="tomato", approval_status=ApprovalStatus.PENDING)
        make_crop(name="tomato", approval_status=ApprovalStatus.REJECTED)
        assert gateway.search("tomato") == [tomato.pk]

    def test_blank_query_finds_nothing(self, gateway, tomato):
        assert gateway.search("") == []
        assert gateway.search("   ") == []

    def test_respects_limit(self, gateway, make_crop):
        for number in range(5):
            make_crop(name=f"bean {number}")
        assert len(gateway.search("bean", limit=3)) == 3

    def test_index_and_deindex_are_no_ops(self, gateway, tomato):
        gateway.index(tomato)
        gateway.deindex(tomato.pk)
        assert gateway.search("tomato") == [tomato.pk]


class TestSearchCrops:
    """Crop.objects.search and search_crops."""

    def test_returns_crops(self, tomato, maize):
        assert Crop.objects.search("tomato") == [tomato]
        assert search_crops("maize") == [maize]

    def test_no_match(self, tomato):
        assert Crop.objects.search("pumpkin") == []

    def test_keeps_gateway_order(self, tomato, maize):
        gateway = MagicMock()
        gateway.search.return_value = [maize.pk, tomato.pk]
        with patch("crops.search.get_search_gateway", return_value=gateway):
            assert search_crops("anything") == [maize, tomato]

    def test_drops_crops_no_longer_approved(self, tomato, maize):
        reject(maize, RejectionReason.NOT_EDIBLE)
        gateway = MagicMock()
        gateway.search.return_value = [maize.pk, tomato.pk, 9999]
        with patch("crops.search.get_search_gateway", return_value=gateway):
            assert search_crops("anything") == [tomato]

    def test_restricted_to_queryset(self, tomato, maize):
        gateway = MagicMock()
        gateway.search.return_value = [maize.pk, tomato.pk]
        with patch("crops.search.get_search_gateway", return_value=gateway):
            assert Crop.objects.filter(name="tomato").search("anything") == [tomato]

    def test_gateway_from_settings(self, settings):
        assert isinstance(get_search_gateway(), DatabaseSearchGateway)
        settings.CROPS_SEARCH_GATEWAY = "crops.search.ElasticsearchGateway"
        assert isinstance(get_search_gateway(), ElasticsearchGateway)


class TestElasticsearchGateway:
    """Talking to Elasticsearch over HTTP."""

    @pytest.fixture
    def gateway(self):
        return ElasticsearchGateway(
            base_url="http://search.example.com:9200/",
            index_name="crops-test",
            timeout=2,
        )

    @pytest.fixture
    def mock_client(self):
        with patch("httpx.Client") as mock_client_class:
            mock_client = MagicMock()
            mock_client_class.return_value.__enter__.return_value = mock_client
            yield mock_client

    def _response(self, status_code=200, payload=None):
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = payload or {}
        response.text = ""
        return response

    def test_document(self, tomato):
        tomato.add_scientific_names_from_csv("Solanum lycopersicum")
        tomato.add_alternate_names_from_csv("love apple")
        document = crop_document(tomato)
        assert document["id"] == tomato.pk
        assert document["name"] == "tomato"
        assert document["approval_status"] == "approved"
        assert document["scientific_names"] == ["Solanum lycopersicum"]
        assert document["alternate_names"] == ["love apple"]

    def test_index_puts_document(self, gateway, mock_client, tomato):
        mock_client.request.return_value = self._response(201)
        gateway.index(tomato)

        method, url = mock_client.request.call_args.args
        assert method == "PUT"
        assert url == f"http://search.example.com:9200/crops-test/_doc/{tomato.pk}"
        assert mock_client.request.call_args.kwargs["json"]["name"] == "tomato"

    def test_index_skips_unapproved_crop(self, gateway, mock_client, make_crop):
        crop = make_crop(name="okra", approval_status=ApprovalStatus.PENDING)
        gateway.index(crop)
        mock_client.request.assert_not_called()

    def test_index_error_status(self, gateway, mock_client, tomato):
        mock_client.request.return_value = self._response(500)
        with pytest.raises(SearchGatewayError, match="status 500"):
            gateway.index(tomato)

    def test_deindex_deletes_document(self, gateway, mock_client):
        mock_client.request.return_value = self._response(200)
        gateway.deindex(42)
        assert mock_client.request.call_args.args == (
            "DELETE",
            "http://search.example.com:9200/crops-test/_doc/42",
        )

    def test_deindex_tolerates_missing_document(self, gateway, mock_client):
        mock_client.request.return_value = self._response(404)
        gateway.deindex(42)

    def test_search_returns_hit_ids(self, gateway, mock_client):
        mock_client.request.return_value = self._response(
            200, {"hits": {"hits": [{"_id": "7"}, {"_id": "3"}]}}
        )
        assert gateway.search("tom", limit=5) == [7, 3]

        method, url = mock_client.request.call_args.args
        payload = mock_client.request.call_args.kwargs["json"]
        assert method == "POST"
        assert url.endswith("/crops-test/_search")
        assert payload["size"] == 5
        assert payload["query"]["bool"]["filter"] == [{"term": {"approval_status": "approved"}}]

    def test_blank_search_makes_no_request(self, gateway, mock_client):
        assert gateway.search("  ") == []
        mock_client.request.assert_not_called()

    def test_malformed_search_response(self, gateway, mock_client):
        mock_client.request.return_value = self._response(200, {"unexpected": True})
        with pytest.raises(SearchGatewayError, match="Unexpected search response"):
            gateway.search("tom")

    def test_timeout(self, gateway, mock_client, tomato):
        mock_client.request.side_effect = httpx.ConnectTimeout("timed out")
        with pytest.raises(SearchGatewayError, match="timeout"):
            gateway.index(tomato)

    def test_connection_error(self, gateway, mock_client):
        mock_client.request.side_effect = httpx.ConnectError("refused")
        with pytest.raises(SearchGatewayError, match="connection error"):
            gateway.deindex(1)


class TestIndexTasks:
    """Celery tasks that update the index."""

    @pytest.fixture
    def gateway(self):
        gateway = MagicMock()
        with patch("crops.tasks.get_search_gateway", return_value=gateway):
            yield gateway

    def test_index_approved_crop(self, gateway, tomato):
        result = index_crop(tomato.pk)
        assert result == {"crop_id": tomato.pk, "status": "indexed"}
        gateway.index.assert_called_once_with(tomato)

    def test_index_removes_unapproved_crop(self, gateway, make_crop):
        crop = make_crop(name="okra", approval_status=ApprovalStatus.REJECTED)
        assert index_crop(crop.pk)["status"] == "deindexed"
        gateway.deindex.assert_called_once_with(crop.pk)
        gateway.index.assert_not_called()

    def test_index_removes_deleted_crop(self, gateway, db):
        assert index_crop(9999)["status"] == "deindexed"
        gateway.deindex.assert_called_once_with(9999)

    def test_index_failure_is_reported(self, gateway, tomato):
        gateway.index.side_effect = SearchGatewayError("index unavailable")
        result = index_crop(tomato.pk)
        assert result["status"] == "failed"
        assert result["error"] == "index unavailable"

    def test_deindex(self, gateway, db):
        assert deindex_crop(5) == {"crop_id": 5, "status": "deindexed"}
        gateway.deindex.assert_called_once_with(5)

    def test_deindex_failure_is_reported(self, gateway, db):
        gateway.deindex.side_effect = SearchGatewayError("index unavailable")
        assert deindex_crop(5)["status"] == "failed"

    def test_reindex_sends_approved_crops_only(self, gateway, tomato, maize, make_crop):
        make_crop(name="okra", approval_status=ApprovalStatus.PENDING)
        result = reindex_approved_crops()
        assert result == {"indexed": 2, "failed": 0}
        assert {call.args[0] for call in gateway.index.call_args_list} == {tomato, maize}

    def test_reindex_continues_after_failure(self, gateway, tomato, maize):
        gateway.index.side_effect = [SearchGatewayError("boom"), None]
        assert reindex_approved_crops() == {"indexed": 1, "failed": 1}


class TestIndexSignals:
    """Moderation changes queue index updates after commit."""

    @pytest.fixture
    def queued(self):
        with patch("crops.tasks.index_crop.delay") as index_delay, patch(
            "crops.tasks.deindex_crop.delay"
        ) as deindex_delay:
            yield index_delay, deindex_delay

    def test_creating_approved_crop_indexes_it(self, queued, make_crop, django_capture_on_commit_callbacks):
        index_delay, deindex_delay = queued
        with django_capture_on_commit_callbacks(execute=True):
            crop = make_crop(name="okra")
        index_delay.assert_called_once_with(crop.pk)
        deindex_delay.assert_not_called()

    def test_creating_pending_crop_does_nothing(self, queued, make_crop, django_capture_on_commit_callbacks):
        index_delay, deindex_delay = queued
        with django_capture_on_commit_callbacks(execute=True):
            make_crop(name="okra", approval_status=ApprovalStatus.PENDING)
        index_delay.assert_not_called()
        deindex_delay.assert_not_called()

    def test_approving_indexes(self, queued, make_crop, django_capture_on_commit_callbacks):
        index_delay, _ = queued
        crop = make_crop(name="okra", approval_status=ApprovalStatus.PENDING)
        with django_capture_on_commit_callbacks(execute=True):
            approve(crop)
        index_delay.assert_called_once_with(crop.pk)

    def test_rejecting_approved_crop_deindexes(self, queued, tomato, django_capture_on_commit_callbacks):
        index_delay, deindex_delay = queued
        with django_capture_on_commit_callbacks(execute=True):
            reject(tomato, RejectionReason.ALREADY_IN_DATABASE)
        deindex_delay.assert_called_once_with(tomato.pk)
        index_delay.assert_not_called()

    def test_saving_without_status_change_does_nothing(self, queued, tomato, django_capture_on_commit_callbacks):
        index_delay, deindex_delay = queued
        with django_capture_on_commit_callbacks(execute=True):
            tomato.request_notes = "updated"
            tomato.save()
        index_delay.assert_not_called()
        deindex_delay.assert_not_called()

    def test_deleting_approved_crop_deindexes(self, queued, tomato, django_capture_on_commit_callbacks):
        _, deindex_delay = queued
        crop_id = tomato.pk
        with django_capture_on_commit_callbacks(execute=True):
            tomato.delete()
        deindex_delay.assert_called_once_with(crop_id)

    def test_nothing_queued_before_commit(self, queued, make_crop, django_capture_on_commit_callbacks):
        index_delay, _ = queued
        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            make_crop(name="okra")
        index_delay.assert_not_called()
        assert len(callbacks) == 1

    def test_queue_failure_does_not_break_moderation(self, queued, make_crop, django_capture_on_commit_callbacks, caplog):
        index_delay, _ = queued
        index_delay.side_effect = ConnectionError("broker down")
        crop = make_crop(name="okra", approval_status=ApprovalStatus.PENDING)

        with django_capture_on_commit_callbacks(execute=True):
            approve(crop)

        crop.refresh_from_db()
        assert crop.is_approved
        assert "Could not queue" in caplog.text
