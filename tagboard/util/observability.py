"""Observability configuration using Logfire.

Usage:
    import logfire

    logfire.info("Posts inserted", count=len(posts))

    with logfire.span("post_service.publish", count=len(posts)):
        ...
"""

import logfire

from tagboard.config import Settings


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire for observability.

    Cloud sending follows ``OBSERVABILITY__SEND_TO_LOGFIRE`` when set, and
    otherwise is enabled only when ``OBSERVABILITY__LOGFIRE_TOKEN`` is present.

    Args:
        settings: Application settings
    """
    if settings.observability.send_to_logfire is not None:
        send_to_logfire = settings.observability.send_to_logfire
    elif settings.observability.logfire_token:
        send_to_logfire = True
    else:
        send_to_logfire = False

    config_kwargs = {
        "service_name": "tagboard",
        "service_version": "0.1.0",
        "environment": settings.environment,
        "send_to_logfire": send_to_logfire,
        "console": logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
    }

    if settings.observability.logfire_token:
        config_kwargs["token"] = settings.observability.logfire_token

    logfire.configure(**config_kwargs)

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        debug=settings.debug,
        send_to_logfire=send_to_logfire,
        has_token=bool(settings.observability.logfire_token),
    )


def instrument_pymongo() -> None:
    """Instrument the MongoDB driver with Logfire.

    Traces every command sent to the server with its duration and outcome.
    Must run before clients are created.
    """
    logfire.instrument_pymongo(capture_statement=True)
    logfire.info("PyMongo instrumented")
