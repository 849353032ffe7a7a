#!/usr/bin/env python3
"""Ad hoc recipe parser for the stovetop core.

Parse pasted recipe text without any app around it.

Usage:
    python parse_recipe.py recipe.txt
    cat recipe.txt | python parse_recipe.py -
    python parse_recipe.py --json recipe.txt  # Full Recipe as JSON
    python parse_recipe.py --optimize recipe.txt  # Heat optimizer table
    python parse_recipe.py --simulate --fast recipe.txt  # Guided session, voice off, fast ticks

Features:
- Ingredient and step tables with detected actions and timers
- High-heat savings per step and for the whole recipe
- Guided-cooking simulation with spoken lines written to the log
"""

import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from stovetop.cooking.heat import estimate_optimized_time, estimate_total_time, optimizable_steps
from stovetop.cooking.session import CookingSessionStateMachine
from stovetop.cooking.voice import LoggingSpeaker, VoiceAssistant
from stovetop.models.models import Recipe
from stovetop.parsing.durations import format_time
from stovetop.parsing.taxonomy import detect_cooking_action
from stovetop.services.recipe_builder import RecipeInputError, build_recipe
from stovetop.utils.logger import logger

console = Console()

USAGE = "Usage: python parse_recipe.py [--json] [--optimize] [--simulate] [--fast] [--name NAME] FILE|-"

FAST_TICK_SECONDS = 0.01


def read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def render_recipe(recipe: Recipe) -> None:
    ingredients = Table(title=f"🧂 Ingredients ({len(recipe.ingredients)})")
    ingredients.add_column("Ingredient")
    ingredients.add_column("Quantity", style="cyan")
    for ingredient in recipe.ingredients:
        ingredients.add_row(ingredient.name, ingredient.quantity)

    steps = Table(title=f"👨‍🍳 Steps ({len(recipe.steps)})")
    steps.add_column("#", justify="right")
    steps.add_column("Instruction")
    steps.add_column("Action")
    steps.add_column("Timer", justify="right", style="green")
    for step in recipe.sorted_steps:
        action = detect_cooking_action(step.instruction)
        timer = format_time(step.duration_seconds) if step.duration_seconds else "-"
        steps.add_row(str(step.order + 1), step.instruction, f"{action.emoji} {action.label}", timer)

    console.print(ingredients)
    console.print(steps)


def render_optimizer(recipe: Recipe) -> None:
    candidates = optimizable_steps(recipe.sorted_steps)
    if not candidates:
        console.print("[yellow]No steps worth moving to high heat[/yellow]")
        return

    table = Table(title="🔥 High-heat savings")
    table.add_column("#", justify="right")
    table.add_column("Step")
    table.add_column("Low", justify="right")
    table.add_column("High", justify="right")
    table.add_column("Saved", justify="right", style="green")
    for candidate in candidates:
        table.add_row(
            str(candidate.step.order + 1),
            candidate.step.instruction,
            format_time(candidate.original_duration),
            format_time(candidate.optimized_duration),
            format_time(candidate.saved_seconds),
        )
    console.print(table)

    total = estimate_total_time(recipe.steps)
    optimized = estimate_optimized_time(recipe.steps)
    console.print(
        f"Total: [bold]{format_time(total)}[/bold] → [bold]{format_time(optimized)}[/bold] "
        f"(saves {format_time(total - optimized)})"
    )


async def simulate(recipe: Recipe, optimize: bool, fast: bool) -> None:
    """Run a guided session to the end, logging every spoken line."""
    loop = asyncio.get_running_loop()
    optimized_orders = {candidate.step.order for candidate in optimizable_steps(recipe.steps)} if optimize else set()

    if fast:
        voice = VoiceAssistant(enabled=False)
        tick_interval: Optional[float] = FAST_TICK_SECONDS
    else:
        voice = VoiceAssistant(speaker=LoggingSpeaker(loop))
        tick_interval = None

    session = CookingSessionStateMachine(recipe, optimized_orders, voice=voice, loop=loop)
    await session.run(tick_interval=tick_interval, hands_free=True)
    console.print(f"[green]✓ Finished all {session.step_count} steps of '{recipe.name}'[/green]")


def run(source: str, name: Optional[str], as_json: bool, optimize: bool, simulate_session: bool, fast: bool) -> None:
    try:
        raw_text = read_source(source)
        recipe_name = name or (Path(source).stem if source != "-" else "Pasted recipe")
        recipe = build_recipe(recipe_name, raw_text)

        if as_json:
            console.print_json(data=recipe.model_dump(mode="json"))
        else:
            render_recipe(recipe)
        if optimize:
            render_optimizer(recipe)
        if simulate_session:
            asyncio.run(simulate(recipe, optimize, fast))

    except RecipeInputError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)
    except FileNotFoundError:
        console.print(f"[red]✗ Error: File not found: {source}[/red]")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
        sys.exit(0)


def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv

    as_json = optimize = simulate_session = fast = False
    name = None
    index = 0

    while index < len(args) and args[index].startswith("--"):
        flag = args[index]
        if flag == "--json":
            as_json = True
        elif flag == "--optimize":
            optimize = True
        elif flag == "--simulate":
            simulate_session = True
        elif flag == "--fast":
            fast = True
        elif flag == "--name":
            index += 1
            if index >= len(args):
                print("Error: --name flag requires a value")
                sys.exit(1)
            name = args[index]
        else:
            print(f"Unknown flag: {flag}")
            sys.exit(1)
        index += 1

    if index >= len(args):
        print("Error: No input file provided")
        print(USAGE)
        sys.exit(1)

    run(args[index], name, as_json, optimize, simulate_session, fast)


if __name__ == "__main__":
    main()
