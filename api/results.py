"""Vercel serverless function serving prelim round results."""

import json
import logging
import sys
from pathlib import Path

# Add the project root to the path so we can import the judging package
sys.path.insert(0, str(Path(__file__).parent.parent))

# Import store backends to register them
from judging.stores import firebase  # noqa: F401
from judging.stores import json_file  # noqa: F401
from judging.stores import memory  # noqa: F401

from judging.config import configure_logging, settings
from judging.models import CompetitorRole
from judging.results import ResultsError, compile_round_results
from judging.stores import create_store
from judging.stores.base import StoreError

configure_logging()
logger = logging.getLogger(__name__)


def handler(request):
    """Handle incoming requests for round results.

    Accepts:
    - POST with JSON body: {"competition_id": "...", "role": "Leader" | "Follower"}

    Returns JSON with the results table and advancing competitors.
    """
    # Handle CORS preflight
    if request.method == "OPTIONS":
        return create_response(
            "",
            status=204,
            headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": "POST, OPTIONS",
                "Access-Control-Allow-Headers": "Content-Type",
            },
        )

    if request.method != "POST":
        return create_response(
            {"error": "Method not allowed. Use POST."},
            status=405,
        )

    try:
        content_type = request.headers.get("content-type", "")
        if "application/json" not in content_type:
            return create_response(
                {"error": f"Unsupported content type: {content_type}"},
                status=400,
            )

        data = json.loads(request.body.decode("utf-8"))
        if not isinstance(data, dict):
            return create_response(
                {"error": "Request body must be a JSON object"},
                status=400,
            )
        competition_id = data.get("competition_id")
        if not competition_id:
            return create_response(
                {"error": "Missing 'competition_id' in request body"},
                status=400,
            )

        try:
            role = CompetitorRole(data.get("role", CompetitorRole.LEADER.value))
        except ValueError:
            return create_response(
                {"error": f"Invalid role: {data.get('role')}"},
                status=400,
            )

        with create_store(settings) as store:
            result = compile_round_results(store, competition_id, role)

        return create_response(result.to_dict())

    except ResultsError as e:
        return create_response(
            {"error": str(e)},
            status=404,
        )
    except json.JSONDecodeError as e:
        return create_response(
            {"error": f"Invalid JSON: {e}"},
            status=400,
        )
    except StoreError as e:
        logger.error("Store unavailable: %s", e)
        return create_response(
            {"error": "Score store is unavailable, please try again"},
            status=503,
        )
    except Exception as e:
        logger.exception("Unexpected error compiling results")
        return create_response(
            {"error": f"Internal error: {e}"},
            status=500,
        )


def create_response(body, status: int = 200, headers: dict = None):
    """Create a response object for Vercel."""
    response_headers = {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*",
    }
    if headers:
        response_headers.update(headers)

    if isinstance(body, dict):
        body = json.dumps(body)

    # Return in format expected by Vercel Python runtime
    return {
        "statusCode": status,
        "headers": response_headers,
        "body": body,
    }
