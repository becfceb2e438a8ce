import asyncio
import argparse
import json
import logging
from core.analyzer_registry import AnalyzerRegistry
from core.batch import scan_many, DEFAULT_CONCURRENCY
from core.config import FetchPolicy, DEFAULT_RETRY_COUNT, DEFAULT_ATTEMPT_TIMEOUT, DEFAULT_RETRY_BACKOFF
from core.engine import DetectionEngine
from core.scanner import DomainScanner
from core.targets import dedupe_domains, load_domains
from fetch.dns_client import MicrosoftDnsProvider
from fetch.http_client import ResilientFetcher
from rules.rules_loader import load_detection_options

def _truncate_value(value: str, max_length: int = 200) -> str:
    """Truncate a string to max_length, adding ellipsis if truncated."""
    if not value:
        return value
    if len(value) <= max_length:
        return value
    return value[:max_length] + "..."

def _serialize_result(r, value_max_length: int = 200):
    verdict = "Unknown" if r.verdict is None else str(r.verdict)
    return {
        "domain": r.domain,
        "verdict": verdict,
        "score": r.score,
        "confidence": str(r.confidence),
        "server": r.server,
        "status_code": r.artifacts.status_code,
        "final_url": r.artifacts.final_url,
        "elapsed": round(r.artifacts.elapsed, 3),
        "notes": list(r.notes),
        "evidence": [
            {
                "signal": str(e.signal),
                "description": e.description,
                "value": _truncate_value(e.value, value_max_length),
                "weight": e.weight,
            }
            for e in r.evidence
        ],
    }

def main():
    parser = argparse.ArgumentParser(description="Estimate whether domains run on ASP.NET from their HTTP responses")
    parser.add_argument("input", nargs="?", default="targets.txt", help="File with one domain per line (default: targets.txt)")
    parser.add_argument("-d", "--domain", action="append", help="Scan this domain instead of reading the input file (repeatable)")
    parser.add_argument("--retries", type=int, default=DEFAULT_RETRY_COUNT, help=f"Retries per scheme (default: {DEFAULT_RETRY_COUNT})")
    parser.add_argument("--timeout", type=float, default=DEFAULT_ATTEMPT_TIMEOUT, help=f"Per-attempt timeout in seconds (default: {DEFAULT_ATTEMPT_TIMEOUT})")
    parser.add_argument("--backoff", type=float, default=DEFAULT_RETRY_BACKOFF, help=f"Retry backoff base in seconds (default: {DEFAULT_RETRY_BACKOFF})")
    parser.add_argument("--no-http-fallback", action="store_true", help="Do not retry over plain HTTP when HTTPS fails")
    parser.add_argument("-c", "--concurrency", type=int, default=DEFAULT_CONCURRENCY, help=f"Number of parallel scans (default: {DEFAULT_CONCURRENCY})")
    parser.add_argument("--rules-file", type=str, help="YAML file with thresholds and signal weights")
    parser.add_argument("--dns-enrichment", action="store_true", help="Add evidence from DNS records pointing at Microsoft infrastructure")
    parser.add_argument("--exclude-analyzer", action="append", default=[], choices=AnalyzerRegistry.get_all_names(), help="Skip this analyzer (repeatable)")
    parser.add_argument("--value-max-length", type=int, default=200, help="Maximum length for evidence values (default: 200, use 0 for unlimited)")
    parser.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity level (default: INFO)")
    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, args.log_level),
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger = logging.getLogger(__name__)

    try:
        policy = FetchPolicy(
            retry_count=args.retries,
            per_attempt_timeout=args.timeout,
            retry_backoff_base=args.backoff,
            allow_http_fallback=not args.no_http_fallback,
        )
    except ValueError as e:
        parser.error(str(e))

    options = load_detection_options(args.rules_file)

    if args.domain:
        domains = dedupe_domains(args.domain)
    else:
        try:
            domains = load_domains(args.input)
        except FileNotFoundError:
            logger.error(f"Input file not found: {args.input}")
            return

    if not domains:
        logger.warning("No domains to scan")
        return

    providers = [MicrosoftDnsProvider(options)] if args.dns_enrichment else []

    async def run():
        async with ResilientFetcher(policy) as fetcher:
            scanner = DomainScanner(fetcher, DetectionEngine(options, exclude_analyzers=set(args.exclude_analyzer)), enrichment_providers=providers)
            return await scan_many(scanner, domains, concurrency=args.concurrency)

    try:
        report = asyncio.run(run())
    except KeyboardInterrupt:
        logger.warning("Scan cancelled by user")
        return

    summary = report.summary()
    logger.info(
        f"Completed {summary['completed']}/{summary['scanned']}: {summary['likely']} likely, "
        f"{summary['borderline']} borderline, {summary['errors']} errors, average score {summary['average_score']}"
    )

    max_len = None if args.value_max_length == 0 else args.value_max_length
    output = {
        "results": [_serialize_result(r, max_len or 999999) for r in report.results],
        "errors": [{"domain": d, "message": m} for d, m in report.errors],
        "summary": summary,
    }
    print(json.dumps(output, indent=2))

if __name__ == "__main__":
    main()
