"""Tests for AnchoreClient."""

import base64
import json
from unittest.mock import patch

import httpx
import pytest

from ecs_inventory.clients.anchore import ACCOUNT_HEADER, AnchoreClient
from ecs_inventory.config import AnchoreInfo, HTTPConfig
from ecs_inventory.domains.inventory.models import Container, Report
from ecs_inventory.utils.errors import (
    AnchoreAuthenticationError,
    AnchoreConnectionError,
    AnchoreResponseError,
    ReportingError,
)


@pytest.fixture
def report(cluster_arn: str) -> Report:
    """A minimal one-container report."""
    return Report(
        timestamp="2024-05-01T12:00:00Z",
        cluster_name="web",
        cluster_arn=cluster_arn,
        containers=[
            Container(
                name="app",
                image="nginx:1.25",
                task_arn="arn:aws:ecs:us-east-1:123456789012:task/web/aaa",
                cluster_arn=cluster_arn,
            )
        ],
    )


class TestBuildURL:
    """Tests for AnchoreClient.build_url."""

    def test_appends_api_path(self) -> None:
        """Test the API path is appended to the base URL."""
        client = AnchoreClient(AnchoreInfo(url="https://ancho.re", user="admin", password="foobar"))
        assert client.build_url() == "https://ancho.re/v1/enterprise/ecs-inventory"

    def test_trailing_slash_is_kept(self) -> None:
        """Test a trailing slash in the base is not normalized away."""
        client = AnchoreClient(AnchoreInfo(url="https://ancho.re/", user="admin", password="foobar"))
        assert client.build_url() == "https://ancho.re//v1/enterprise/ecs-inventory"

    def test_base_path_is_kept(self) -> None:
        """Test a base URL with a path prefix keeps it."""
        client = AnchoreClient(AnchoreInfo(url="https://ancho.re/api", user="admin", password="x"))
        assert client.build_url() == "https://ancho.re/api/v1/enterprise/ecs-inventory"


class TestPost:
    """Tests for AnchoreClient.post."""

    def test_success_sends_report(self, anchore_info: AnchoreInfo, report: Report) -> None:
        """Test the request carries URL, auth, headers and the JSON report."""
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(201, text="ignored")

        client = AnchoreClient(anchore_info, transport=httpx.MockTransport(handler))
        client.post(report)

        assert len(captured) == 1
        request = captured[0]
        assert request.method == "POST"
        assert str(request.url) == "https://ancho.re/v1/enterprise/ecs-inventory"
        assert request.headers["content-type"] == "application/json"
        assert request.headers[ACCOUNT_HEADER] == "engineering"
        expected_auth = base64.b64encode(b"admin:foobar").decode()
        assert request.headers["authorization"] == f"Basic {expected_auth}"

        body = json.loads(request.content)
        assert body["clusterName"] == "web"
        assert body["timestamp"] == "2024-05-01T12:00:00Z"
        assert body["containers"][0]["image"] == "nginx:1.25"
        assert "tasks" not in body
        assert "services" not in body

    @pytest.mark.parametrize("status", [200, 202, 204, 299])
    def test_any_2xx_is_success(
        self, anchore_info: AnchoreInfo, report: Report, status: int
    ) -> None:
        """Test every 2xx status counts as delivered."""
        transport = httpx.MockTransport(lambda request: httpx.Response(status))
        AnchoreClient(anchore_info, transport=transport).post(report)

    def test_unauthorized_asks_to_check_credentials(
        self, anchore_info: AnchoreInfo, report: Report
    ) -> None:
        """Test a 401 response is classified as a credentials problem."""
        transport = httpx.MockTransport(lambda request: httpx.Response(401, text="unauthorized"))

        with pytest.raises(AnchoreAuthenticationError, match="check credentials") as exc_info:
            AnchoreClient(anchore_info, transport=transport).post(report)

        assert exc_info.value.cluster == report.cluster_arn

    def test_server_error_is_generic(self, anchore_info: AnchoreInfo, report: Report) -> None:
        """Test a 500 response carries status and detail, not a credentials hint."""
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(AnchoreResponseError) as exc_info:
            AnchoreClient(anchore_info, transport=transport).post(report)

        assert exc_info.value.status_code == 500
        assert exc_info.value.cluster == report.cluster_arn
        assert "boom" in str(exc_info.value)
        assert "check credentials" not in str(exc_info.value)
        assert not isinstance(exc_info.value, AnchoreAuthenticationError)

    def test_connection_refused(self, anchore_info: AnchoreInfo, report: Report) -> None:
        """Test a transport failure is classified as a connection error."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(AnchoreConnectionError) as exc_info:
            AnchoreClient(anchore_info, transport=httpx.MockTransport(handler)).post(report)

        assert not isinstance(exc_info.value, AnchoreAuthenticationError)
        assert isinstance(exc_info.value, ReportingError)
        assert "connection refused" in str(exc_info.value)

    def test_timeout(self, anchore_info: AnchoreInfo, report: Report) -> None:
        """Test a timeout is classified as a connection error."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(AnchoreConnectionError):
            AnchoreClient(anchore_info, transport=httpx.MockTransport(handler)).post(report)

    def test_html_characters_not_escaped_in_body(
        self, anchore_info: AnchoreInfo, cluster_arn: str
    ) -> None:
        """Test <, > and & are sent literally."""
        captured: list[bytes] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request.content)
            return httpx.Response(200)

        report = Report(
            timestamp="2024-05-01T12:00:00Z",
            cluster_name="web",
            cluster_arn=cluster_arn,
            containers=[
                Container(name="a<b>&c", image="img", task_arn="t", cluster_arn=cluster_arn)
            ],
        )
        AnchoreClient(anchore_info, transport=httpx.MockTransport(handler)).post(report)

        assert b"a<b>&c" in captured[0]

    @pytest.mark.parametrize("insecure", [True, False])
    def test_http_policy_applied(self, report: Report, insecure: bool) -> None:
        """Test TLS verification and timeout follow the configured HTTP policy."""
        anchore = AnchoreInfo(
            url="https://ancho.re",
            user="admin",
            password="foobar",
            http=HTTPConfig(insecure=insecure, timeout_seconds=3),
        )

        with patch("ecs_inventory.clients.anchore.httpx.Client") as mock_client_cls:
            mock_client = mock_client_cls.return_value.__enter__.return_value
            mock_client.post.return_value = httpx.Response(200)

            AnchoreClient(anchore).post(report)

        kwargs = mock_client_cls.call_args.kwargs
        assert kwargs["verify"] is (not insecure)
        assert kwargs["timeout"] == 3

    @pytest.mark.parametrize(
        "url",
        ["http://[::1", "https://ancho.re\x00x", "https://\u00fc" + "a" * 70 + ".example.com"],
    )
    def test_malformed_url_is_connection_error(self, report: Report, url: str) -> None:
        """Test an unusable base URL is classified as a connection error for the cluster."""
        anchore = AnchoreInfo(url=url, user="admin", password="foobar")

        with pytest.raises(AnchoreConnectionError) as exc_info:
            AnchoreClient(anchore).post(report)

        assert exc_info.value.cluster == report.cluster_arn

    def test_zero_timeout_disables_limit(self, report: Report) -> None:
        """Test a timeout of 0 means no timeout."""
        anchore = AnchoreInfo(
            url="https://ancho.re",
            user="admin",
            password="foobar",
            http=HTTPConfig(timeout_seconds=0),
        )

        with patch("ecs_inventory.clients.anchore.httpx.Client") as mock_client_cls:
            mock_client = mock_client_cls.return_value.__enter__.return_value
            mock_client.post.return_value = httpx.Response(200)

            AnchoreClient(anchore).post(report)

        assert mock_client_cls.call_args.kwargs["timeout"] is None
