"""
Notes Resolver Toolkit
======================
Local developer tooling for the AppSync notes resolver Lambda:
  1. Building and invoking AppSync direct resolver events from YAML/JSON files
  2. A local HTTP gateway that forwards GraphQL field requests to the resolver
  3. Creating the notes table in DynamoDB Local

Dependencies (install via pip):
  boto3>=1.28.0
  flask>=3.0.0
  pyyaml>=6.0.0

Example usage:
  # Start DynamoDB Local and create the table
  docker run -p 8000:8000 amazon/dynamodb-local
  python notes_toolkit.py --endpoint-url http://localhost:8000 create-table

  # Invoke the resolver with an event file
  python notes_toolkit.py --endpoint-url http://localhost:8000 invoke create_note.yaml

  # Run the local gateway on localhost:8080
  python notes_toolkit.py --endpoint-url http://localhost:8000 serve --port 8080

  # In another terminal, post a field request
  curl -X POST -H "Content-Type: application/json" \
       --data '{"fieldName": "createNote", "arguments": {"note": {"content": "buy milk"}}}' \
       http://localhost:8080/graphql

Notes:
  • The table name comes from --table or NOTES_TABLE (default "notes").
  • --endpoint-url / DYNAMODB_ENDPOINT_URL points boto3 at DynamoDB Local.
  • --handler / NOTES_RESOLVER_PATH locate the resolver handler.py; the
    default only exists in a source checkout, so an installed toolkit needs one.
  • Storage errors are reported as GraphQL-style errors, the way AppSync
    surfaces a failed Lambda invocation.
"""
from __future__ import annotations

import argparse
import importlib.util
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import boto3
import yaml
from botocore.exceptions import BotoCoreError, ClientError

DEFAULT_TABLE = "notes"
SOURCE_RESOLVER_PATH = (
    Path(__file__).resolve().parent.parent
    / "notes-appsync-lab" / "app" / "lambdas" / "notes_resolver" / "handler.py"
)


# ---------------------------
# Event Helpers
# ---------------------------

def build_event(field_name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Shape a field request the way AppSync hands it to a direct Lambda resolver."""
    return {
        "info": {"fieldName": field_name},
        "arguments": arguments or {},
    }


def load_event(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        if path.endswith((".yaml", ".yml")):
            raw = yaml.safe_load(f)
        else:
            raw = json.load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Event file must contain a mapping: {path}")
    if "info" not in raw:
        raw = build_event(raw.get("fieldName", ""), raw.get("arguments"))
    return raw


def resolver_path(override: Optional[str] = None) -> Path:
    """Resolve the handler file: --handler, then NOTES_RESOLVER_PATH, then the source tree."""
    path = Path(override or os.environ.get("NOTES_RESOLVER_PATH") or SOURCE_RESOLVER_PATH)
    if not path.is_file():
        raise FileNotFoundError(
            f"Resolver handler not found at {path}; pass --handler or set NOTES_RESOLVER_PATH"
        )
    return path


def load_resolver(path: Optional[Path] = None):
    """Load the Lambda handler module. NOTES_TABLE must already be set."""
    path = path or resolver_path()
    spec = importlib.util.spec_from_file_location("notes_resolver_handler", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


# ---------------------------
# Table Bootstrap
# ---------------------------

def create_table(table_name: str, endpoint_url: Optional[str] = None):
    dynamodb = boto3.resource("dynamodb", endpoint_url=endpoint_url)
    try:
        table = dynamodb.create_table(
            TableName=table_name,
            KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
    except ClientError as e:
        if e.response["Error"]["Code"] != "ResourceInUseException":
            raise
        print(f"[*] Table {table_name} already exists")
        return dynamodb.Table(table_name)

    table.wait_until_exists()
    print(f"[*] Table {table_name} created")
    return table


# ---------------------------
# Local Gateway
# ---------------------------

def storage_error(e: Exception) -> Dict[str, Any]:
    """GraphQL-style error entry for a failed storage call."""
    if isinstance(e, ClientError):
        error = e.response.get("Error", {})
        return {"message": error.get("Message", str(e)), "errorType": error.get("Code")}
    return {"message": str(e), "errorType": type(e).__name__}


def create_app(resolver):
    from flask import Flask, jsonify, request

    app = Flask(__name__)

    @app.route("/graphql", methods=["POST"])
    def graphql():
        payload = request.get_json(force=True, silent=True)
        if not isinstance(payload, dict):
            return jsonify({"errors": [{"message": "request body must be a JSON object"}]}), 400

        if "info" in payload and not isinstance(payload["info"], dict):
            return jsonify({"errors": [{"message": "info must be a JSON object"}]}), 400

        event = payload if "info" in payload else build_event(
            payload.get("fieldName", ""), payload.get("arguments")
        )
        try:
            result = resolver.lambda_handler(event, None)
        except (ClientError, BotoCoreError) as e:
            return jsonify({"data": None, "errors": [storage_error(e)]}), 502
        return jsonify({"data": result})

    return app


def run_gateway(resolver, host: str, port: int):
    app = create_app(resolver)
    print(f"[*] Notes gateway listening on http://{host}:{port}/graphql")
    app.run(host=host, port=port, threaded=True)


# ---------------------------
# CLI Interface
# ---------------------------

def _resolver_path_or_exit(parser, override):
    try:
        return resolver_path(override)
    except FileNotFoundError as e:
        parser.error(str(e))


def cli(argv=None):
    parser = argparse.ArgumentParser(description="Notes Resolver Toolkit CLI")
    parser.add_argument("--table", default=os.environ.get("NOTES_TABLE", DEFAULT_TABLE),
                        help="Notes table name (default $NOTES_TABLE or 'notes')")
    parser.add_argument("--endpoint-url", default=os.environ.get("DYNAMODB_ENDPOINT_URL"),
                        help="DynamoDB endpoint, e.g. http://localhost:8000 for DynamoDB Local")
    parser.add_argument("--handler", default=None,
                        help="Path to the resolver handler.py (default $NOTES_RESOLVER_PATH or the source tree)")
    sub = parser.add_subparsers(dest="command", required=True)

    # invoke
    i = sub.add_parser("invoke", help="Invoke the resolver with an event file (YAML/JSON)")
    i.add_argument("input", help="Path to event YAML/JSON file")

    # serve
    s = sub.add_parser("serve", help="Run the local GraphQL gateway")
    s.add_argument("--host", default="127.0.0.1", help="Bind address (default 127.0.0.1)")
    s.add_argument("--port", default=8080, type=int, help="Port (default 8080)")

    # create-table
    sub.add_parser("create-table", help="Create the notes table")

    args = parser.parse_args(argv)

    os.environ["NOTES_TABLE"] = args.table
    if args.endpoint_url:
        os.environ["DYNAMODB_ENDPOINT_URL"] = args.endpoint_url

    if args.command == "create-table":
        create_table(args.table, args.endpoint_url)

    elif args.command == "invoke":
        event = load_event(args.input)
        resolver = load_resolver(_resolver_path_or_exit(parser, args.handler))
        try:
            result = resolver.lambda_handler(event, None)
        except (ClientError, BotoCoreError) as e:
            print(f"[✗] Invocation failed: {e}")
            sys.exit(1)
        print(json.dumps(result, indent=2, default=str))

    elif args.command == "serve":
        run_gateway(load_resolver(_resolver_path_or_exit(parser, args.handler)), args.host, args.port)


if __name__ == "__main__":
    cli()
