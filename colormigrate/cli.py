"""colormigrate CLI - Main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

import click
from rich.table import Table

from colormigrate import __version__
from colormigrate.ui import console


class VerboseGroup(click.Group):
    """Help system that groups registered commands by workflow stage."""

    def format_commands(self, ctx, formatter):
        """Override to suppress default command listing (we use categorized format in format_help)."""
        pass

    COMMAND_CATEGORIES = {
        "PREPARE": {
            "title": "PREPARE",
            "description": "Check the mapping before touching any source",
            "commands": ["map-validate"],
            "command_meta": {
                "map-validate": {
                    "run_when": "After editing the mapping YAML",
                },
            },
        },
        "MIGRATE": {
            "title": "MIGRATE",
            "description": "Preview and apply the rewrite",
            "commands": ["refactor"],
            "command_meta": {
                "refactor": {
                    "use_when": "Dry run first, then --apply",
                },
            },
        },
        "RECOVER": {
            "title": "RECOVER",
            "description": "Backups taken before every applied run",
            "commands": ["rollback", "backup"],
            "command_meta": {
                "rollback": {
                    "use_when": "Undo an applied refactor",
                },
                "backup": {
                    "use_when": "List, verify or prune backups",
                },
            },
        },
    }

    def format_help(self, ctx, formatter):
        """Generate Rich-styled categorized help."""
        super().format_help(ctx, formatter)

        registered = {
            name: cmd
            for name, cmd in self.commands.items()
            if not name.startswith("_") and not getattr(cmd, "hidden", False)
        }

        console.print()
        console.rule("[bold]COMMANDS[/bold]")

        for _category_id, category_data in self.COMMAND_CATEGORIES.items():
            console.print(f"\n[bold cyan]{category_data['title']}[/bold cyan]")
            console.print(f"[dim]{category_data['description']}[/dim]")

            table = Table(show_header=False, box=None, padding=(0, 2, 0, 0))
            table.add_column("Command", style="cmd", width=14)
            table.add_column("Description", style="white")
            table.add_column("Hint", style="dim", width=36)

            for cmd_name in category_data["commands"]:
                if cmd_name not in registered:
                    continue
                cmd = registered[cmd_name]

                first_line = (cmd.help or "").split("\n")[0].strip()
                period_idx = first_line.find(".")
                short_help = first_line[:period_idx] if period_idx > 0 else first_line
                if len(short_help) > 45:
                    short_help = short_help[:45].rsplit(" ", 1)[0] + "..."

                cmd_meta = category_data.get("command_meta", {}).get(cmd_name, {})
                hint = ""
                if "use_when" in cmd_meta:
                    hint = f"USE: {cmd_meta['use_when']}"
                elif "run_when" in cmd_meta:
                    hint = f"RUN: {cmd_meta['run_when']}"

                table.add_row(cmd_name, short_help, hint)

            console.print(table)

        console.print()
        console.rule()
        console.print("For detailed options: [cmd]color-migrate <command> --help[/cmd]")


@click.group(cls=VerboseGroup)
@click.version_option(version=__version__, prog_name="color-migrate")
@click.help_option("-h", "--help")
def cli():
    """colormigrate - Move Flutter colour constants onto the theme

    \b
    QUICK START:
      color-migrate map-validate --mapping color_mapping.yaml
      color-migrate refactor --mapping color_mapping.yaml          # dry run
      color-migrate refactor --mapping color_mapping.yaml --apply
      color-migrate rollback --list

    \b
    For detailed options: color-migrate <command> --help"""
    pass


from colormigrate.commands.backup import backup
from colormigrate.commands.map_validate import map_validate
from colormigrate.commands.refactor import refactor
from colormigrate.commands.rollback import rollback

cli.add_command(map_validate)
cli.add_command(refactor)
cli.add_command(rollback)
cli.add_command(backup)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == "__main__":
    main()
