# SPDX-License-Identifier: MIT

from rich import box
from rich.console import Console
from rich.table import Table

from recon.model.inspection import InspectionSection
from recon.service.status import get_status_key
from recon.view.header import header


def sections_view(sections: list[InspectionSection]) -> None:
    """Display the inspection catalog with its items."""
    header("inspection sections")

    sections_table = Table(box=box.SIMPLE)
    sections_table.add_column("section")
    sections_table.add_column("status key")
    sections_table.add_column("item")
    sections_table.add_column("label")
    sections_table.add_column("active")

    for section in sorted(sections, key=lambda s: s["order"]):
        kind = "custom" if section["is_custom"] else "default"
        sections_table.add_row(
            f"[bold]{section['key']}[/bold]",
            get_status_key(section["key"]),
            "",
            f"{section['label']} ({kind})",
            "yes" if section["is_active"] else "no",
        )
        for item in sorted(section["items"], key=lambda item: item["order"]):
            sections_table.add_row(
                "",
                "",
                item["id"],
                item["label"],
                "yes" if item["is_active"] else "no",
            )

    console = Console()
    console.print(sections_table)
