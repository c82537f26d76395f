"""Tests for the order-import command line."""

import json

import pytest

from order_import.cli import build_parser, load_payload, main, render_summary, run_import
from order_import.domain.models import OrderDomain


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args(["payload.json"])

        assert str(args.payload) == "payload.json"
        assert args.admin is False
        assert args.role == []
        assert args.database_url is None

    def test_roles_accumulate(self):
        args = build_parser().parse_args(["-", "--role", "support", "--role", "finance", "--admin"])

        assert args.role == ["support", "finance"]
        assert args.admin is True


class TestLoadPayload:
    def test_plain_payload(self, tmp_path):
        path = tmp_path / "order.json"
        path.write_text(json.dumps({"email": "ana@example.com"}), encoding="utf-8")

        assert load_payload(path) == {"email": "ana@example.com"}

    def test_wrapped_payload_is_unwrapped(self, tmp_path):
        path = tmp_path / "order.json"
        path.write_text(json.dumps({"order": {"email": "ana@example.com"}}), encoding="utf-8")

        assert load_payload(path) == {"email": "ana@example.com"}


def test_render_summary_lists_totals():
    table = render_summary(OrderDomain(number="R123456789", id=5))

    assert table.title == "Order R123456789"
    assert table.row_count == 14


class TestRunImport:
    @pytest.mark.asyncio
    async def test_unreadable_payload(self, tmp_path):
        args = build_parser().parse_args([str(tmp_path / "missing.json")])

        assert await run_import(args) == 2

    @pytest.mark.asyncio
    async def test_import_into_new_database(self, tmp_path, capsys):
        path = tmp_path / "order.json"
        path.write_text(json.dumps({"order": {"email": "ana@example.com"}}), encoding="utf-8")
        url = f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}"
        args = build_parser().parse_args([str(path), "--database-url", url, "--create-schema"])

        assert await run_import(args) == 0
        assert '"email": "ana@example.com"' in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_failed_import_exit_code(self, tmp_path, capsys):
        path = tmp_path / "order.json"
        path.write_text(json.dumps({"line_items": [{"sku": "NOPE", "quantity": 1}]}), encoding="utf-8")
        url = f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}"
        args = build_parser().parse_args([str(path), "--database-url", url, "--create-schema"])

        assert await run_import(args) == 1
        assert "LINE_ITEM_IMPORT_FAILED" in capsys.readouterr().err


def test_main_exits_with_code(tmp_path):
    with pytest.raises(SystemExit) as exc_info:
        main([str(tmp_path / "missing.json")])

    assert exc_info.value.code == 2
