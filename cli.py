# cli.py
import os
import sys
from datetime import datetime
from typing import List, Dict, Any, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

import requests
from sdk.octa_client import OctaClient

console = Console()
c = OctaClient(base_url=os.getenv("OCTA_URL", "http://127.0.0.1:8080"))

# Global state for status messages and caching
status_message = "Ready"
product_cache: List[Dict[str, Any]] = []
category_cache: List[Dict[str, Any]] = []
current_user: Optional[str] = None

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def _money(value: Any) -> str:
    return f"${value:,.2f}" if isinstance(value, (int, float)) else "-"


def show_products(products: List[Dict[str, Any]]):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return
    table = Table(title="📦 Products", box=box.ROUNDED, header_style="bold cyan", show_lines=True)
    table.add_column("ID", style="dim", width=24)
    table.add_column("Name", style="bold", width=20)
    table.add_column("Description", width=30)
    table.add_column("Price", justify="right", width=12)
    for p in products:
        table.add_row(p.get("_id", ""), p.get("name") or "", p.get("description") or "", _money(p.get("price")))
    console.print(table)


def show_categories(categories: List[Dict[str, Any]]):
    if not categories:
        console.print("[italic yellow]No categories found[/italic yellow]")
        return
    names = {cat["_id"]: cat.get("cname") for cat in categories}
    table = Table(title="🏷️ Categories", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("ID", style="dim", width=24)
    table.add_column("Name", style="bold", width=24)
    table.add_column("Parent", width=24)
    for cat in categories:
        parent = cat.get("parentCategoryID")
        table.add_row(cat["_id"], cat.get("cname") or "", names.get(parent, parent or "[dim]top level[/dim]"))
    console.print(table)


def show_commissions(commissions: List[Dict[str, Any]]):
    if not commissions:
        console.print("[italic yellow]No commissions found[/italic yellow]")
        return
    table = Table(title="💸 Commissions", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("ID", style="dim", width=24)
    table.add_column("Product", width=24)
    table.add_column("%", justify="right", width=8)
    table.add_column("Category", width=24)
    table.add_column("Active", justify="center", width=8)
    for cm in commissions:
        active = "[green]yes[/green]" if cm.get("active") else "[red]no[/red]"
        table.add_row(cm["_id"], cm.get("productID") or "", str(cm.get("commissionPercentage", "")),
                      cm.get("parentCategoryID") or "", active)
    console.print(table)


def show_reviews(reviews: List[Dict[str, Any]]):
    if not reviews:
        console.print("[italic yellow]No reviews found[/italic yellow]")
        return
    table = Table(title="⭐ Reviews", box=box.ROUNDED, header_style="bold cyan", show_lines=True)
    table.add_column("ID", style="dim", width=24)
    table.add_column("Product", width=24)
    table.add_column("Rating", justify="center", width=8)
    table.add_column("Comment", width=30)
    table.add_column("Response", width=30)
    for r in reviews:
        table.add_row(r["_id"], r.get("productId") or "", str(r.get("rating", "")),
                      r.get("comment") or "", r.get("response") or "")
    console.print(table)


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# API wrapper with exception handling
# ---------------------------
def _error_message(e: Exception) -> str:
    if isinstance(e, requests.exceptions.HTTPError) and e.response is not None:
        try:
            return f"HTTP {e.response.status_code}: {e.response.json().get('message')}"
        except ValueError:
            return f"HTTP {e.response.status_code}"
    return str(e)


def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner. Returns the decoded JSON,
    or None after printing the error.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except (requests.exceptions.RequestException, KeyError) as e:
        status_message = f"Error: {_error_message(e)}"
        console.print(show_status(status_message, False))
        return None


# ---------------------------
# Autocompletion helpers
# ---------------------------
def get_product_completer():
    global product_cache
    if not product_cache:
        product_cache = try_api(c.list_products) or []
    return WordCompleter([p["_id"] for p in product_cache], ignore_case=True, meta_dict={
        p["_id"]: p.get("name") or "" for p in product_cache
    })


def get_category_completer():
    global category_cache
    if not category_cache:
        category_cache = try_api(c.list_categories) or []
    return WordCompleter([cat["_id"] for cat in category_cache], ignore_case=True, meta_dict={
        cat["_id"]: cat.get("cname") or "" for cat in category_cache
    })


def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_float(message: str, default: float = 0.0) -> float:
    while True:
        raw = Prompt.ask(message, default=str(default))
        try:
            return float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")


def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)
    who = f"[green]{current_user}[/green]" if current_user else "[dim]not logged in[/dim]"
    header.add_row("🛠️ octa admin", who, f"[dim]{datetime.now().strftime('%Y-%m-%d %H:%M:%S')}[/dim]")
    return Panel(header, style="bold blue")


# ---------------------------
# Main menu
# ---------------------------
def login_flow():
    global current_user, product_cache, category_cache
    username = Prompt.ask("👤 Username")
    password = Prompt.ask("🔑 Password", password=True)
    if try_api(c.login, username, password, success_msg=f"Logged in as {username}"):
        current_user = username
        product_cache, category_cache = [], []


def menu():
    global status_message, product_cache, category_cache, current_user

    console.clear()
    console.print(create_header())

    while True:
        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        options = [
            ("1", "🔐 Log in", "7", "➕ Add category"),
            ("2", "🙋 Who am I", "8", "💸 List commissions"),
            ("3", "📦 List products", "9", "➕ Add commission"),
            ("4", "➕ Add product", "10", "🔁 Toggle commission"),
            ("5", "🗑️ Delete product", "11", "⭐ List reviews"),
            ("6", "🏷️ List categories", "12", "💬 Respond to review"),
            ("", "", "q", "👋 Log out & quit"),
        ]
        for row in options:
            menu_table.add_row(*row)
        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 13)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            login_flow()

        elif choice == "2":
            resp = try_api(c.session_info)
            if resp:
                console.print(Panel.fit(f"userId: [bold]{resp['userId']}[/bold]", title="Session"))

        elif choice == "3":
            product_cache = try_api(c.list_products, success_msg="Products loaded") or []
            show_products(product_cache)

        elif choice == "4":
            name = Prompt.ask("🏷️ Name")
            description = Prompt.ask("📝 Description", default="")
            price = ask_float("💲 Price", default=0.0)
            resp = try_api(c.add_product, name, description or None, price,
                           success_msg=f"Product '{name}' created")
            if resp:
                product_cache = []
                show_products([resp])

        elif choice == "5":
            pid = prompt_with_autocomplete("Product ID", completer=get_product_completer())
            if Confirm.ask(f"[red]Delete product {pid}?[/red]"):
                if try_api(c.delete_product, pid, success_msg=f"Product {pid} deleted"):
                    product_cache = []

        elif choice == "6":
            category_cache = try_api(c.list_categories, success_msg="Categories loaded") or []
            show_categories(category_cache)

        elif choice == "7":
            cname = Prompt.ask("🏷️ Category name")
            parent = prompt_with_autocomplete("Parent category ID (blank for top level)",
                                              completer=get_category_completer()).strip()
            resp = try_api(c.add_category, cname, parent or None, success_msg=f"Category '{cname}' created")
            if resp:
                category_cache = []

        elif choice == "8":
            category = prompt_with_autocomplete("Filter by category ID (blank for all)",
                                                completer=get_category_completer()).strip()
            resp = try_api(c.list_commissions, category=category or None)
            if resp is not None:
                show_commissions(resp)

        elif choice == "9":
            pid = prompt_with_autocomplete("Product ID", completer=get_product_completer())
            pct = ask_float("Commission %", default=5.0)
            category = prompt_with_autocomplete("Category ID (optional)", completer=get_category_completer()).strip()
            resp = try_api(c.add_commission, pid, pct, category or None, success_msg="Commission created")
            if resp:
                show_commissions([resp])

        elif choice == "10":
            cid = Prompt.ask("Commission ID")
            resp = try_api(c.toggle_commission, cid)
            if resp:
                console.print(show_status(resp["message"], True))
                show_commissions([resp["commission"]])

        elif choice == "11":
            resp = try_api(c.list_reviews, success_msg="Reviews loaded")
            if resp is not None:
                show_reviews(resp)

        elif choice == "12":
            rid = Prompt.ask("Review ID")
            text = Prompt.ask("💬 Response")
            resp = try_api(c.respond_to_review, rid, text, success_msg="Response saved")
            if resp:
                show_reviews([resp])

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                if current_user:
                    try_api(c.logout)
                console.print(Panel.fit("[bold green]Bye! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
