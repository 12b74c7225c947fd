"""TransTrack entry point.

    transtrack              run the API server
    transtrack worker       run the ARQ pipeline worker
"""

import argparse

import uvicorn

from transtrack.config import settings


def run_api(host: str, port: int) -> None:
    uvicorn.run(
        "transtrack.api.app:app",
        host=host,
        port=port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )


def run_worker() -> None:
    from arq import run_worker as arq_run_worker

    from transtrack.workers import WorkerSettings

    arq_run_worker(WorkerSettings)


def main(argv: list[str] | None = None) -> None:
    """Run the TransTrack API server or its pipeline worker."""
    parser = argparse.ArgumentParser(
        prog="transtrack",
        description="Document translation job tracker",
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=["api", "worker"],
        default="api",
        help="What to run (default: api)",
    )
    parser.add_argument("--host", type=str, default=settings.host, help="API bind address")
    parser.add_argument("--port", type=int, default=settings.port, help="API port")
    args = parser.parse_args(argv)

    if args.command == "worker":
        run_worker()
    else:
        run_api(args.host, args.port)


if __name__ == "__main__":
    main()
