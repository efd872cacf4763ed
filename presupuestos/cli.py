import json
import logging
import sys
from pathlib import Path

import click

from presupuestos import constants
from presupuestos.fiscal import calculate_recargo, recargo_config, total_recargo
from presupuestos.normalize import normalize_numbers
from presupuestos.parsing.money import NumberParseError, format_eur, parse_number
from presupuestos.payload import budget_items, build_pdf_payload
from presupuestos.totals import calculate_totals
from presupuestos.trace import make_sink
from presupuestos.tree import prune, renumber


def _read_json(path: Path) -> dict:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        click.echo(f"[ERROR] Cannot read {path.name}: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging")
def main(verbose):
    """Presupuestos – build PDF payloads from stored budgets."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)


@main.command()
@click.argument("budget", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("tariff", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the payload here instead of stdout",
)
@click.option(
    "--base-url",
    default=None,
    help="Base URL for relative logo paths (default: PRESUPUESTOS_BASE_URL)",
)
@click.option(
    "--trace-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Save intermediate stages as JSON (default: PRESUPUESTOS_TRACE_DIR)",
)
@click.option("--strict", is_flag=True, default=False, help="Fail on malformed numbers")
def build(budget, tariff, output, base_url, trace_dir, strict):
    """Build the PDF payload for BUDGET with the branding of TARIFF."""
    budget_data = _read_json(budget)
    tariff_data = _read_json(tariff)
    sink = make_sink(trace_dir or constants.TRACE_DIR or None)

    try:
        payload = build_pdf_payload(
            budget_data,
            tariff_data,
            base_url=base_url,
            trace=sink,
            strict=strict or None,
        )
    except NumberParseError as e:
        click.echo(f"[ERROR] {e}", err=True)
        sys.exit(1)

    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if output:
        output.write_text(text, encoding="utf-8")
        click.echo(f"[OK] {output}")
    else:
        click.echo(text)


@main.command()
@click.argument("budget", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--strict", is_flag=True, default=False, help="Fail on malformed numbers")
def totals(budget, strict):
    """Print the totals chain (subtotal, IRPF, RE, total) of BUDGET."""
    budget_data = _read_json(budget)
    try:
        items = normalize_numbers(
            renumber(prune(budget_items(budget_data), strict=strict or None)),
            strict=strict or None,
        )
        result = calculate_totals(items, budget_data, strict=strict or None)
    except NumberParseError as e:
        click.echo(f"[ERROR] {e}", err=True)
        sys.exit(1)

    lines = []
    if "subtotal" in result:
        lines.append(result["subtotal"])
    lines.append(result["base"])
    lines.extend(result["ivas"])
    if "irpf" in result:
        lines.append(result["irpf"])
    lines.extend(result.get("re", []))
    lines.append(result["total"])
    for line in lines:
        click.echo(f"{line['name']:<30} {format_eur(parse_number(line['amount'])):>16}")


def _parse_re_option(values) -> dict[str, str]:
    recargos = {}
    for value in values:
        iva, sep, re_pct = value.partition("=")
        if not sep or not iva.strip() or not re_pct.strip():
            raise click.BadParameter(f"expected IVA=RE, got {value!r}", param_hint="--re")
        recargos[iva.strip()] = re_pct.strip()
    return recargos


@main.command()
@click.argument("budget", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--re",
    "re_rates",
    multiple=True,
    required=True,
    help="RE percentage per IVA rate, e.g. --re 21=5,2 --re 10=1,4",
)
def recargo(budget, re_rates):
    """Compute the recargo de equivalencia amounts for BUDGET."""
    recargos = _parse_re_option(re_rates)
    budget_data = _read_json(budget)
    re_by_iva = calculate_recargo(budget_items(budget_data), recargos)
    click.echo(json.dumps(recargo_config(re_by_iva), indent=2))
    click.echo(f"Total RE: {format_eur(total_recargo(re_by_iva))}")


if __name__ == "__main__":
    main()
