import pytest
from core.config import DetectionOptions
from core.context import ScanArtifacts
from analyzers.headers import HeadersAnalyzer
from analyzers.cookies import CookiesAnalyzer
from analyzers.html import HtmlAnalyzer
from analyzers.final_url import FinalUrlAnalyzer
from models.signal import Signal


@pytest.fixture
def options():
    return DetectionOptions()


def test_headers_analyzer_matches_case_insensitively(options):
    artifacts = ScanArtifacts(
        domain="example.com",
        headers={"x-powered-by": "asp.net", "server": "microsoft-iis/10.0"},
    )

    evidence = HeadersAnalyzer(options).analyze(artifacts)

    assert [e.signal for e in evidence] == [Signal.HEADER_POWERED_BY_ASPNET, Signal.HEADER_IIS_SERVER]
    assert [e.weight for e in evidence] == [3, 2]
    assert evidence[1].value == "microsoft-iis/10.0"


def test_headers_analyzer_ignores_other_frameworks(options):
    artifacts = ScanArtifacts(
        domain="example.com",
        headers={"x-powered-by": "PHP/8.2", "server": "nginx"},
    )

    assert HeadersAnalyzer(options).analyze(artifacts) == []


def test_version_header_counts_even_when_empty(options):
    artifacts = ScanArtifacts(domain="example.com", headers={"x-aspnet-version": ""})

    evidence = HeadersAnalyzer(options).analyze(artifacts)

    assert len(evidence) == 1
    assert evidence[0].signal == Signal.HEADER_ASPNET_VERSION
    assert evidence[0].weight == 4


def test_cookie_matches_core_before_legacy(options):
    # ".AspNetCore" also contains ".AspNet"; it must only count once
    artifacts = ScanArtifacts(
        domain="example.com",
        cookies=(
            ".AspNetCore.Antiforgery.9fXoN5jHCXs=CfDJ8; path=/",
            ".ASPXAUTH=0123; path=/; HttpOnly",
            "ASP.NET_SessionId=abc; path=/",
            "_ga=GA1.2.3",
        ),
    )

    evidence = CookiesAnalyzer(options).analyze(artifacts)

    assert [e.signal for e in evidence] == [Signal.COOKIE_ASPNET_CORE, Signal.COOKIE_ASPNET, Signal.COOKIE_ASPNET]
    assert evidence[0].value.startswith(".AspNetCore.Antiforgery")


def test_html_analyzer_skips_missing_body(options):
    assert HtmlAnalyzer(options).analyze(ScanArtifacts(domain="example.com", html=None)) == []
    assert HtmlAnalyzer(options).analyze(ScanArtifacts(domain="example.com", html="")) == []


def test_html_analyzer_finds_all_markers(options):
    html = """
    <form method="post" action="./Default.aspx">
        <input type="hidden" name="__viewstate" value="/wEPDwUK" />
    </form>
    <!-- rendered from Views/Shared/_Layout.cshtml -->
    <pre>@{ ViewData["Title"] = "Home"; }</pre>
    """

    evidence = HtmlAnalyzer(options).analyze(ScanArtifacts(domain="example.com", html=html))

    assert [e.signal for e in evidence] == [
        Signal.HTML_VIEWSTATE,
        Signal.HTML_CSHTML_REFERENCE,
        Signal.HTML_RAZOR_DIRECTIVE,
    ]
    assert evidence[1].value == ".cshtml"
    assert evidence[2].value == "@{"
    assert sum(e.weight for e in evidence) == 9


def test_html_analyzer_matches_model_directive(options):
    evidence = HtmlAnalyzer(options).analyze(
        ScanArtifacts(domain="example.com", html="@model MyApp.ViewModels.HomeViewModel")
    )

    assert len(evidence) == 1
    assert evidence[0].value == "@model MyApp.ViewModels.HomeViewModel"


def test_html_analyzer_searches_whole_captured_body(options):
    html = "a" * 210_000 + "@model Shop.Models.Cart"

    evidence = HtmlAnalyzer(options).analyze(ScanArtifacts(domain="example.com", html=html))

    assert [e.signal for e in evidence] == [Signal.HTML_RAZOR_DIRECTIVE]
    assert evidence[0].value == "@model Shop.Models.Cart"


def test_html_analyzer_ignores_plain_email_addresses(options):
    html = "<a href='mailto:info@example.com'>Contact</a>"

    assert HtmlAnalyzer(options).analyze(ScanArtifacts(domain="example.com", html=html)) == []


def test_final_url_analyzer_checks_path_only(options):
    analyzer = FinalUrlAnalyzer(options)

    hit = analyzer.analyze(ScanArtifacts(domain="example.com", final_url="https://example.com/Home/Default.ASPX?x=1"))
    miss = analyzer.analyze(ScanArtifacts(domain="example.com", final_url="https://example.com/?next=/login.aspx"))

    assert len(hit) == 1
    assert hit[0].signal == Signal.FINAL_URL_ASPX
    assert hit[0].value == "https://example.com/Home/Default.ASPX?x=1"
    assert miss == []


def test_final_url_analyzer_handles_missing_url(options):
    assert FinalUrlAnalyzer(options).analyze(ScanArtifacts(domain="example.com")) == []
