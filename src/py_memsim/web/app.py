"""Flask application factory for the simulator's JSON API.

The ``create_app`` function returns a Flask app with two endpoints:

- ``GET /api/policies`` — list the replacement policy names.
- ``POST /api/simulate`` — replay a trace sent as JSON and return the
  output lines and counters.

Every simulation shares the backing store file given to ``create_app``,
so page contents written by one request are visible to the next, just
as with repeated command-line runs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from flask import Flask, Response, jsonify, request

from py_memsim.config import ConfigError, PolicyName, check_run_parameters
from py_memsim.memory.backing import BackingStore, IOFaultError
from py_memsim.output import format_record
from py_memsim.simulation import simulate
from py_memsim.trace import parse_trace

_HTTP_BAD_REQUEST = 400
_HTTP_SERVER_ERROR = 500
_REQUIRED_FIELDS = ("levels", "frames", "policy", "tick", "trace")


def _int_field(data: dict[str, Any], name: str) -> int:
    value = data[name]
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"'{name}' must be an integer"
        raise ConfigError(msg)
    return value


def create_app(backing_store_path: Path) -> Flask:
    """Create and configure the Flask application.

    Args:
        backing_store_path: The backing store file every run uses.

    Returns:
        A configured Flask application ready to serve.

    """
    store = BackingStore(Path(backing_store_path))
    app = Flask(__name__)

    @app.route("/api/policies")
    def policies() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the supported policy names."""
        return jsonify({"policies": [p.value for p in PolicyName]})

    @app.route("/api/simulate", methods=["POST"])
    def run_simulation() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Run a simulation and return its output.

        Expects JSON body::

            {"levels": 1, "frames": 4, "policy": "FIFO", "tick": 10,
             "trace": ["r 0x0000", "w 0x0040 0x2a"]}

        Returns:
            JSON with ``lines``, ``faults``, ``hits``, ``evictions`` and
            ``writebacks``.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "Expected a JSON object"}), _HTTP_BAD_REQUEST
        missing = [name for name in _REQUIRED_FIELDS if name not in data]
        if missing:
            return jsonify({"error": f"Missing field(s): {', '.join(missing)}"}), _HTTP_BAD_REQUEST

        try:
            levels = _int_field(data, "levels")
            frames = _int_field(data, "frames")
            tick = _int_field(data, "tick")
            check_run_parameters(levels=levels, frame_count=frames, tick=tick)
            policy = PolicyName.parse(str(data["policy"]))
            trace = data["trace"]
            if not isinstance(trace, list) or not all(isinstance(line, str) for line in trace):
                msg = "'trace' must be a list of strings"
                raise ConfigError(msg)
            result = simulate(
                parse_trace(trace),
                levels=levels,
                frame_count=frames,
                policy=policy,
                tick=tick,
                store=store,
            )
        except ConfigError as exc:
            return jsonify({"error": str(exc)}), _HTTP_BAD_REQUEST
        except IOFaultError as exc:
            return jsonify({"error": str(exc)}), _HTTP_SERVER_ERROR

        return jsonify(
            {
                "lines": [format_record(r) for r in result.records],
                "faults": result.fault_count,
                "hits": result.hit_count,
                "evictions": result.eviction_count,
                "writebacks": result.writeback_count,
            }
        )

    return app
