from __future__ import annotations

import argparse
import sys

from recruit_relay.config import get_settings
from recruit_relay.signature import compute_signature
from recruit_relay.sms import classify_reply
from recruit_relay.templates import render_template


def _parse_variables(pairs: list[str]) -> dict[str, str]:
    variables: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise SystemExit(f"expected KEY=VALUE, got {pair!r}")
        variables[key] = value
    return variables


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recruit-relay-debug",
        description="Helpers for poking at the relay by hand.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sign = sub.add_parser("sign", help="Print the X-Twilio-Signature for a URL and form body.")
    sign.add_argument("url", type=str)
    sign.add_argument("body", type=str)
    sign.add_argument("--token", type=str, default=None, help="Defaults to TWILIO_AUTH_TOKEN.")

    classify = sub.add_parser("classify", help="Print the intent of an SMS reply.")
    classify.add_argument("text", type=str)

    render = sub.add_parser("render", help="Render a message template.")
    render.add_argument("template_id", type=str)
    render.add_argument("variables", nargs="*", help="KEY=VALUE pairs")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    if args.command == "sign":
        token = args.token or get_settings().twilio_auth_token
        if not token:
            print("No auth token: pass --token or set TWILIO_AUTH_TOKEN.", file=sys.stderr)
            raise SystemExit(2)
        print(compute_signature(args.url, args.body, token))
    elif args.command == "classify":
        print(classify_reply(args.text).value)
    else:
        print(render_template(args.template_id, _parse_variables(args.variables)))


if __name__ == "__main__":
    main()
