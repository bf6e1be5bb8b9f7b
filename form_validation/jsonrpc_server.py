#!/usr/bin/env python3
"""
JSON-RPC 2.0 Server for FormValidationService

Lets a web layer written in any language validate submissions by spawning
this process and exchanging newline-delimited JSON-RPC 2.0 messages over
stdin/stdout. Diagnostics go to stderr through ``logging``.

Usage:
    python -m form_validation.jsonrpc_server [--debug] [--config PATH]

Example exchange:
    -> {"jsonrpc":"2.0","id":1,"method":"submit_form","params":{"form":"login","data":{"username":""}}}
    <- {"jsonrpc":"2.0","id":1,"result":{"status":400,"errors":{"username":["The username field is required."]}}}
"""

import argparse
import json
import logging
import signal
import sys
from typing import Any, Dict, Optional

from form_validation import FormValidationService
from form_validation.errors import FormValidationError

logger = logging.getLogger(__name__)


class FormValidationJsonRpcServer:
    """JSON-RPC 2.0 server wrapping FormValidationService API."""

    ERROR_PARSE = -32700
    ERROR_INVALID_REQUEST = -32600
    ERROR_METHOD_NOT_FOUND = -32601
    ERROR_INVALID_PARAMS = -32602
    ERROR_INTERNAL = -32000
    # Bad rule declarations and configuration problems
    ERROR_VALIDATION = -32001

    def __init__(self, debug: bool = False, config_path: Optional[str] = None):
        self.service = FormValidationService(config_path)
        self.debug = debug
        self.running = False
        self.methods = {
            'validate': self._handle_validate,
            'submit_form': self._handle_submit_form,
            'discover_forms': lambda params: self.service.discover_forms(),
            'discover_rules': lambda params: self.service.discover_rules(),
            'set_locale': self._handle_set_locale,
            'reload_config': self._handle_reload_config,
        }

    def start_server(self):
        """Serve requests from stdin until EOF or stop_server()."""
        self.running = True
        logger.debug("JSON-RPC server started", extra={"methods": sorted(self.methods)})

        try:
            while self.running:
                line = sys.stdin.readline()
                if not line:
                    break
                if line.strip():
                    self._write(self.handle_request(line))
        except KeyboardInterrupt:
            logger.debug("Interrupted")

        logger.debug("JSON-RPC server stopped")

    def stop_server(self):
        self.running = False

    def handle_request(self, request_json: str) -> Dict[str, Any]:
        """
        Process one JSON-RPC request line.

        Args:
            request_json: Raw request text

        Returns:
            JSON-RPC response object, carrying either ``result`` or ``error``
        """
        try:
            request = json.loads(request_json)
        except json.JSONDecodeError as e:
            return self._response(None, error=(self.ERROR_PARSE, f"Parse error: {e}"))

        if not isinstance(request, dict) or request.get("jsonrpc") != "2.0":
            return self._response(None, error=(
                self.ERROR_INVALID_REQUEST, "Request must be a JSON-RPC 2.0 object"
            ))

        request_id = request.get("id")
        method = request.get("method")
        params = request.get("params", {})

        if not method:
            return self._response(request_id, error=(self.ERROR_INVALID_REQUEST, "Missing 'method' field"))
        handler = self.methods.get(method)
        if handler is None:
            return self._response(request_id, error=(self.ERROR_METHOD_NOT_FOUND, f"Method not found: {method}"))
        if not isinstance(params, dict):
            return self._response(request_id, error=(
                self.ERROR_INVALID_PARAMS, f"Params must be an object, got {type(params).__name__}"
            ))

        logger.debug("Dispatching", extra={"method": method, "request_id": request_id})
        try:
            return self._response(request_id, result=handler(params))
        except FormValidationError as e:
            return self._response(request_id, error=(
                self.ERROR_VALIDATION, str(e), {"type": type(e).__name__}
            ))
        except (ValueError, TypeError) as e:
            return self._response(request_id, error=(self.ERROR_INVALID_PARAMS, str(e)))
        except Exception as e:
            logger.exception("Unhandled error in %s", method)
            return self._response(request_id, error=(self.ERROR_INTERNAL, f"Internal error: {e}"))

    def _handle_validate(self, params: Dict[str, Any]) -> Dict[str, Any]:
        data = params.get('data')
        rules = params.get('rules')
        if data is None:
            raise ValueError("Missing required parameter: data")
        if not rules:
            raise ValueError("Missing required parameter: rules")

        result = self.service.validate(
            data,
            rules,
            messages=params.get('messages'),
            attributes=params.get('attributes'),
            locale=params.get('locale'),
        )
        return {
            "passed": result.passed,
            "errors": result.errors.to_structured(),
            "data": result.validated_data,
        }

    def _handle_submit_form(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if not params.get('form'):
            raise ValueError("Missing required parameter: form")
        if params.get('data') is None:
            raise ValueError("Missing required parameter: data")
        return self.service.submit(params['form'], params['data'], locale=params.get('locale'))

    def _handle_set_locale(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.service.set_locale(params.get('locale'))
        return {"locale": self.service.get_locale()}

    def _handle_reload_config(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.service.reload_config()
        return {"status": "ok", "forms": sorted(self.service.forms)}

    @staticmethod
    def _response(request_id: Any, result: Any = None, error: Optional[tuple] = None) -> Dict[str, Any]:
        """Build a response object; ``error`` is ``(code, message[, data])``."""
        response = {"jsonrpc": "2.0", "id": request_id}
        if error is None:
            response["result"] = result
        else:
            response["error"] = dict(zip(("code", "message", "data"), error))
        return response

    def _write(self, response: Dict[str, Any]):
        sys.stdout.write(json.dumps(response, ensure_ascii=False) + "\n")
        sys.stdout.flush()


def main():
    parser = argparse.ArgumentParser(description="form-validation-lib JSON-RPC 2.0 server (stdin/stdout)")
    parser.add_argument('--debug', action='store_true', help='Log requests and dispatch to stderr')
    parser.add_argument('--config', default=None,
                        help='Local config file (defaults to the bundled local-config.yaml)')
    args = parser.parse_args()

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    server = FormValidationJsonRpcServer(debug=args.debug, config_path=args.config)
    signal.signal(signal.SIGTERM, lambda sig, frame: server.stop_server())
    signal.signal(signal.SIGINT, lambda sig, frame: server.stop_server())
    server.start_server()


if __name__ == "__main__":
    main()
