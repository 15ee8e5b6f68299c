"""Entrypoint: generate an application from a prompt or check credentials."""

from __future__ import annotations

import argparse
import asyncio
import logging

from pathlib import Path
import sys

from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from codegen_pipeline.config import PipelineConfig, load_settings
from codegen_pipeline.credentials import describe_credentials, resolve_credential
from codegen_pipeline.errors import CredentialError
from codegen_pipeline.file_tools import UnsafePathError, read_text_file, write_generated_files
from codegen_pipeline.llm.invoker import RemoteInvoker
from codegen_pipeline.models import GeneratedFile
from codegen_pipeline.orchestrator import GenerationOrchestrator
from codegen_pipeline.utils import json_dumps


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate multi-file applications with a hosted code model")
    parser.add_argument("--settings", default="config/settings.yaml", help="Path to settings.yaml")

    subparsers = parser.add_subparsers(dest="command")

    gen = subparsers.add_parser("generate", help="Generate an application from a description")
    gen.add_argument("prompt", nargs="?", help="Application description")
    gen.add_argument("--prompt-file", help="Read the description from a text file")
    gen.add_argument("--technology", help="Target technology, e.g. react")
    gen.add_argument("--app-type", help="Application type, e.g. dashboard")
    gen.add_argument("--feature", action="append", default=[], help="Requested feature (repeatable)")
    gen.add_argument("--model", help="Override the provider's default model")
    gen.add_argument("--max-length", type=int, help="Maximum output tokens")
    gen.add_argument("--out", help="Directory to write generated files into")
    gen.add_argument("--json", action="store_true", help="Print the raw JSON response")

    check = subparsers.add_parser("check-credentials", help="Show which provider credential would be used")
    check.add_argument("--probe", action="store_true", help="Make an authenticated test call to the provider")
    return parser


def _run_generate(args: argparse.Namespace, config: PipelineConfig) -> int:
    prompt = args.prompt or ""
    if args.prompt_file:
        prompt = read_text_file(args.prompt_file)

    payload = {
        "prompt": prompt,
        "technology": args.technology,
        "appType": args.app_type,
        "features": args.feature,
        "modelId": args.model,
        "maxLength": args.max_length,
    }
    response = asyncio.run(GenerationOrchestrator(config).handle_payload(payload))

    if args.json:
        print(json_dumps(response))
    if not response["ok"]:
        if not args.json:
            error_type = response.get("errorType", "invalid_request")
            print(f"Generation failed [{error_type}] ({response['statusCode']}): {response['message']}")
        return 1

    out_dir = args.out or config.settings.get("output", {}).get("directory", "generated")
    files = [GeneratedFile(**item) for item in response["files"]]
    try:
        written = write_generated_files(files, out_dir)
    except UnsafePathError as exc:
        print(f"Not writing files: {exc}")
        return 1

    if not args.json:
        print(f"Provider: {response['provider']} ({response['model']})")
        for name, path in written.items():
            print(f"- {name} -> {path}")
    return 0


def _run_check(args: argparse.Namespace, config: PipelineConfig) -> int:
    for row in describe_credentials(config):
        if row["present"]:
            status = f"set (length: {row['length']})"
            if row["formatValid"] is False:
                status += " WARNING: unexpected format"
        else:
            status = "not set"
        print(f"{row['credential']:<24} {status}")

    try:
        credential = resolve_credential(config)
    except CredentialError as exc:
        print(str(exc))
        return 1
    print(f"Selected provider: {credential.provider} via {credential.env_name}")

    if args.probe:
        result = RemoteInvoker(config).provider_for(credential).probe()
        print(f"Probe: {'ok' if result['ok'] else 'failed'} (status={result.get('status')})")
        return 0 if result["ok"] else 1
    return 0


def main() -> None:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args()
    command = args.command
    if command is None:
        parser.print_help()
        return

    settings = load_settings(args.settings)
    logging.basicConfig(
        level=str(settings.get("logging", {}).get("level", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = PipelineConfig.from_env(settings)

    if command == "check-credentials":
        sys.exit(_run_check(args, config))
    sys.exit(_run_generate(args, config))


if __name__ == "__main__":
    main()
