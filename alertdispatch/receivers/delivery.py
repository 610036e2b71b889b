"""Delivery of rendered payloads to one or more endpoints.

A single-endpoint delivery fails when its send fails. A fan-out delivery
sends to every endpoint independently and only fails when all of them
failed; otherwise the last error is kept for diagnostics.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .http import DeliveryError, NotificationSender, SendRequest


logger = logging.getLogger(__name__)


@dataclass
class NotifyResult:
    """Outcome of one notify call."""

    delivered: bool
    error: Optional[Exception] = None
    last_error: Optional[Exception] = None
    failed_endpoints: int = 0
    total_endpoints: int = 0

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None


async def deliver_one(sender: NotificationSender, request: SendRequest) -> NotifyResult:
    """Send a single request; its failure is the overall failure."""
    error = await _send(sender, request)
    if error is not None:
        return NotifyResult(
            delivered=False,
            error=error,
            last_error=error,
            failed_endpoints=1,
            total_endpoints=1
        )
    return NotifyResult(delivered=True, total_endpoints=1)


async def deliver_all(
    sender: NotificationSender,
    requests: Sequence[SendRequest],
    description: str = "notification"
) -> NotifyResult:
    """Send every request concurrently and aggregate the outcomes.

    A send that is cancelled on its own counts as a failed endpoint.
    Cancelling the caller cancels every in-flight send and propagates.

    Args:
        sender: Transport used for every request
        requests: One request per endpoint
        description: What is being sent, used in the aggregated error

    Returns:
        Failed result only if every endpoint failed
    """
    if not requests:
        return NotifyResult(delivered=True)

    outcomes = await asyncio.gather(
        *(_send(sender, request) for request in requests),
        return_exceptions=True
    )

    errors: List[DeliveryError] = []
    for request, outcome in zip(requests, outcomes):
        if outcome is None:
            continue
        if isinstance(outcome, asyncio.CancelledError):
            logger.warning(f"Sending notification to {request.url} was cancelled")
            outcome = DeliveryError("send cancelled", url=request.url)
        elif not isinstance(outcome, DeliveryError):
            raise outcome
        errors.append(outcome)
    last_error = errors[-1] if errors else None

    if len(errors) == len(requests):
        logger.warning(f"All {len(requests)} attempts to send {description} failed")
        return NotifyResult(
            delivered=False,
            error=DeliveryError(f"failed to send {description}: {last_error}"),
            last_error=last_error,
            failed_endpoints=len(errors),
            total_endpoints=len(requests)
        )

    return NotifyResult(
        delivered=True,
        last_error=last_error,
        failed_endpoints=len(errors),
        total_endpoints=len(requests)
    )


async def _send(sender: NotificationSender, request: SendRequest) -> Optional[DeliveryError]:
    try:
        await sender.send(request)
    except DeliveryError as e:
        logger.warning(f"Failed to send notification to {request.url}: {e}")
        return e
    except Exception as e:
        logger.warning(f"Unexpected error sending notification to {request.url}: {e}")
        return DeliveryError(f"unexpected error: {e}", url=request.url)
    return None
