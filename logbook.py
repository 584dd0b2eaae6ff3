#!/usr/bin/env python3
"""
Unified CLI for the carlog maintenance log.

Commands:
  signup / login / logout / whoami / passwd - Account and session
  cars / add-car / delete-car               - Vehicle registry
  history / log / edit / delete-record      - Maintenance records
  export / import                           - CSV history files
  stats                                     - Spending dashboard
  insight                                   - AI maintenance summary
  check-config                              - Validate a config file
"""

import argparse
import getpass
import sys
from datetime import date
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

import yaml
from jsonschema import ValidationError

from carlog import (
    Accounts,
    Car,
    CarlogError,
    Garage,
    MaintenanceRecord,
    ServiceType,
    export_filename,
    request_insight,
)
from carlog.config import (
    Config,
    config_path,
    configure_logging,
    load_config,
    load_schema,
    validate_config_file,
)
from carlog.maintenance_record import is_iso_date
from carlog.stats import DashboardStats

MONTH_LABELS = [
    "JAN", "FEV", "MAR", "ABR", "MAI", "JUN",
    "JUL", "AGO", "SET", "OUT", "NOV", "DEZ",
]

# =============================================================================
# Formatting helpers
# =============================================================================


def format_km(km: Optional[float]) -> str:
    """Format mileage for display."""
    return f"{km:,.0f}".replace(",", ".") if km is not None else "-"


def format_cost(cost: Optional[float]) -> str:
    """Format cost in Brazilian reais (R$ 1.234,56)."""
    if cost is None:
        return "-"
    text = f"{cost:,.2f}"
    return "R$ " + text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_date(iso_date: Optional[str]) -> str:
    """Format YYYY-MM-DD as DD/MM/YYYY; anything else is shown as-is."""
    if not iso_date:
        return "-"
    try:
        return date.fromisoformat(iso_date).strftime("%d/%m/%Y")
    except ValueError:
        return iso_date


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def short_id(full_id: str) -> str:
    """First 8 characters of an id; any unique prefix is accepted back."""
    return full_id[:8]


def confirm(prompt: str, assume_yes: bool = False) -> bool:
    """Ask for an explicit yes before a destructive action."""
    if assume_yes:
        return True
    answer = input(f"{prompt} [s/N] ").strip().lower()
    return answer in ("s", "sim", "y", "yes")


def make_cars_table(cars: List[Car]) -> List[List[str]]:
    """Convert cars to table rows."""
    return [
        [
            short_id(car.id),
            car.make,
            car.model,
            str(car.year),
            car.plate or "S/ Placa",
            format_km(car.current_mileage),
            car.color,
        ]
        for car in cars
    ]


def make_history_table(records: List[MaintenanceRecord]) -> List[List[str]]:
    """Convert maintenance records to table rows."""
    return [
        [
            short_id(r.id),
            format_date(r.date),
            r.part_name,
            r.type.label,
            format_km(r.mileage),
            format_cost(r.cost_or_zero),
            truncate(r.notes),
        ]
        for r in records
    ]


def make_activity_row(stats: DashboardStats) -> List[str]:
    """One cell per month of the selected year; '*' marks months with service."""
    return [
        f"{label}{'*' if stats.has_service_in_month[i] else ''}"
        for i, label in enumerate(MONTH_LABELS)
    ]


def parse_service_type(value: str) -> ServiceType:
    """argparse type for --type (case-insensitive)."""
    try:
        return ServiceType[value.upper()]
    except KeyError:
        raise argparse.ArgumentTypeError(
            f"invalid type '{value}' (choose replacement or revision)"
        )


def parse_record_date(value: str) -> str:
    """argparse type for --date (YYYY-MM-DD)."""
    if not is_iso_date(value):
        raise argparse.ArgumentTypeError(
            f"invalid date '{value}' (use YYYY-MM-DD)"
        )
    return value


def read_password(value: Optional[str], prompt: str) -> str:
    return value if value is not None else getpass.getpass(prompt)


# =============================================================================
# Account commands
# =============================================================================


def cmd_signup(args, config: Config):
    """Create an account and log in."""
    accounts = Accounts(config.storage())
    password = read_password(args.password, "Senha: ")
    user = accounts.register(args.name, args.username, password)
    print(f"Conta criada. Bem-vindo(a), {user.name}!")
    return 0


def cmd_login(args, config: Config):
    accounts = Accounts(config.storage())
    password = read_password(args.password, "Senha: ")
    user = accounts.login(args.username, password)
    print(f"Conectado como {user.username}.")
    return 0


def cmd_logout(args, config: Config):
    Accounts(config.storage()).logout()
    print("Sessão encerrada.")
    return 0


def cmd_whoami(args, config: Config):
    user = Accounts(config.storage()).require_user()
    print(f"{user.name} ({user.username})")
    return 0


def cmd_passwd(args, config: Config):
    """Change the session user's password."""
    accounts = Accounts(config.storage())
    accounts.require_user()
    current = read_password(args.current, "Senha atual: ")
    new = read_password(args.new, "Nova senha: ")
    confirmation = read_password(args.confirm, "Confirmar nova senha: ")
    accounts.change_password(current, new, confirmation)
    print("Senha alterada com sucesso.")
    return 0


# =============================================================================
# Vehicle commands
# =============================================================================


def open_garage(config: Config) -> Garage:
    return Garage.open(Accounts(config.storage()))


def cmd_cars(args, config: Config):
    """List the user's cars."""
    garage = open_garage(config)
    print(f"Garagem de {garage.user.name}: {len(garage.cars)} veículo(s)")
    print()
    if not garage.cars:
        print("Nenhum veículo cadastrado.")
        return 0

    headers = ["ID", "Marca", "Modelo", "Ano", "Placa", "KM Atual", "Cor"]
    print(tabulate(make_cars_table(garage.cars), headers=headers, tablefmt="simple"))
    return 0


def cmd_add_car(args, config: Config):
    garage = open_garage(config)
    car = garage.add_car(
        make=args.make,
        model=args.model,
        year=args.year,
        mileage=args.mileage,
        plate=args.plate,
        color=args.color,
    )
    print(f"Veículo cadastrado: {car.name} [{short_id(car.id)}]")
    return 0


def cmd_delete_car(args, config: Config):
    """Delete a car and all its maintenance records."""
    garage = open_garage(config)
    car = garage.get_car(args.car_id)
    prompt = (
        f"Atenção: Isso excluirá o veículo {car.name} e TODO o seu "
        "histórico de manutenções. Continuar?"
    )
    if not confirm(prompt, args.yes):
        print("Operação cancelada.")
        return 1

    removed = garage.delete_car(car.id)
    print(f"Veículo excluído ({removed} registro(s) removido(s)).")
    return 0


# =============================================================================
# Maintenance commands
# =============================================================================


def cmd_history(args, config: Config):
    """Show a car's maintenance history, newest first."""
    garage = open_garage(config)
    car = garage.get_car(args.car_id)
    records = garage.records_for_car(car.id)

    total_cost = sum(r.cost_or_zero for r in records)

    print(f"Veículo: {car.name}")
    print(f"Placa: {car.plate or 'S/ Placa'}")
    print(f"KM atual: {format_km(car.current_mileage)}")
    print(f"Registros: {len(records)}")
    if total_cost > 0:
        print(f"Custo total: {format_cost(total_cost)}")
    print()

    if not records:
        print("Nenhum registro encontrado.")
        return 0

    headers = ["ID", "Data", "Peça / Serviço", "Tipo", "KM", "Custo", "Obs"]
    print(tabulate(make_history_table(records), headers=headers, tablefmt="simple"))
    return 0


def cmd_log(args, config: Config):
    """Add a new maintenance record."""
    garage = open_garage(config)
    car = garage.get_car(args.car_id)
    record_date = args.date or date.today().isoformat()

    print(f"Novo registro para {car.name}:")
    print(f"  Peça:   {args.part}")
    print(f"  Tipo:   {args.type.label}")
    print(f"  Data:   {format_date(record_date)}")
    print(f"  KM:     {format_km(args.mileage)}")
    if args.cost:
        print(f"  Custo:  {format_cost(args.cost)}")
    if args.notes:
        print(f"  Obs:    {args.notes}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    old_mileage = car.current_mileage
    garage.add_record(
        car.id, args.part, args.type, record_date, args.mileage, args.cost, args.notes
    )
    print("Registro salvo.")
    if car.current_mileage != old_mileage:
        print(f"KM do veículo atualizada para {format_km(car.current_mileage)}.")
    return 0


def cmd_edit(args, config: Config):
    """Edit fields of an existing record."""
    garage = open_garage(config)
    fields = {}
    if args.part is not None:
        fields["part_name"] = args.part
    if args.type is not None:
        fields["type"] = args.type
    if args.date is not None:
        fields["date"] = args.date
    if args.mileage is not None:
        fields["mileage"] = args.mileage
    if args.cost is not None:
        fields["cost"] = args.cost
    if args.notes is not None:
        fields["notes"] = args.notes or None

    if not fields:
        print("Nada para alterar.")
        return 1

    record = garage.edit_record(args.record_id, **fields)
    print(f"Registro {short_id(record.id)} atualizado.")
    return 0


def cmd_delete_record(args, config: Config):
    garage = open_garage(config)
    record = garage.get_record(args.record_id)
    if not confirm("Excluir este registro permanentemente?", args.yes):
        print("Operação cancelada.")
        return 1
    garage.delete_record(record.id)
    print("Registro excluído.")
    return 0


# =============================================================================
# CSV commands
# =============================================================================


def cmd_export(args, config: Config):
    """Write every record of the user to a CSV file."""
    garage = open_garage(config)
    output = args.output or Path(export_filename(garage.user.username))
    with open(output, "w", encoding="utf-8") as fp:
        fp.write(garage.export_csv())
    print(f"{len(garage.records)} registro(s) exportado(s) para {output}")
    return 0


def cmd_import(args, config: Config):
    """Import a CSV file into one car."""
    if not args.file.exists():
        print(f"Error: File not found: {args.file}")
        return 1

    garage = open_garage(config)
    car = garage.get_car(args.car_id)
    with open(args.file, "r", encoding="utf-8", errors="replace") as fp:
        text = fp.read()
    imported = garage.import_csv(text, car.id)
    print(f"{len(imported)} registros importados.")
    return 0


# =============================================================================
# Stats and insight commands
# =============================================================================


def cmd_stats(args, config: Config):
    """Show spending totals, per-month spend and yearly activity."""
    garage = open_garage(config)
    stats = garage.stats(args.year)
    years = garage.available_years()

    print(f"Gasto total: {format_cost(stats.total_spent)}")
    print(f"Serviços: {stats.total_services}")
    print(f"Anos disponíveis: {', '.join(str(y) for y in years)}")
    print()

    print(f"Atividade em {stats.year}:")
    print(tabulate([make_activity_row(stats)], tablefmt="simple"))
    print()

    if not stats.by_month:
        print("Nenhum gasto registrado.")
        return 0

    rows = [[month, format_cost(spent)] for month, spent in stats.months_newest_first()]
    print(tabulate(rows, headers=["Mês", "Gasto"], tablefmt="simple"))
    return 0


def cmd_insight(args, config: Config):
    """Ask the text-generation service for a maintenance summary."""
    garage = open_garage(config)
    car = garage.get_car(args.car_id)
    print("Analisando histórico...")
    print()
    print(request_insight(config.insight_provider(), car, garage.records_for_car(car.id)))
    return 0


def cmd_check_config(args, config: Config):
    """Validate a configuration file against the schema."""
    path = config_path(args.config)
    errors = validate_config_file(path, load_schema())
    if errors:
        print(f"FAIL: {path}")
        for error in errors:
            print(f"  {error}")
        return 1
    print(f"OK: {path}")
    return 0


COMMANDS = {
    "signup": cmd_signup,
    "login": cmd_login,
    "logout": cmd_logout,
    "whoami": cmd_whoami,
    "passwd": cmd_passwd,
    "cars": cmd_cars,
    "add-car": cmd_add_car,
    "delete-car": cmd_delete_car,
    "history": cmd_history,
    "log": cmd_log,
    "edit": cmd_edit,
    "delete-record": cmd_delete_record,
    "export": cmd_export,
    "import": cmd_import,
    "stats": cmd_stats,
    "insight": cmd_insight,
    "check-config": cmd_check_config,
}


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="carlog",
        description="Personal vehicle maintenance log",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s signup "Alice Souza" alice
  %(prog)s add-car Toyota Corolla 2020 50000 --plate ABC1D23
  %(prog)s log 3f2a "Filtro de óleo" --mileage 55000 --cost 89.90
  %(prog)s history 3f2a
  %(prog)s stats --year 2024
  %(prog)s import 3f2a carlog_alice_2024-03-01.csv
""",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config YAML (default: $CARLOG_CONFIG or ~/.carlog/config.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Account subcommands
    signup_parser = subparsers.add_parser("signup", help="Create an account")
    signup_parser.add_argument("name", help="Full name")
    signup_parser.add_argument("username", help="Login name (case-insensitive)")
    signup_parser.add_argument("--password", help="Password (prompted if omitted)")

    login_parser = subparsers.add_parser("login", help="Log in")
    login_parser.add_argument("username")
    login_parser.add_argument("--password", help="Password (prompted if omitted)")

    subparsers.add_parser("logout", help="End the current session")
    subparsers.add_parser("whoami", help="Show the logged-in user")

    passwd_parser = subparsers.add_parser("passwd", help="Change password")
    passwd_parser.add_argument("--current", help="Current password")
    passwd_parser.add_argument("--new", help="New password (at least 4 characters)")
    passwd_parser.add_argument("--confirm", help="New password again")

    # Vehicle subcommands
    subparsers.add_parser("cars", help="List your vehicles")

    add_car_parser = subparsers.add_parser("add-car", help="Register a vehicle")
    add_car_parser.add_argument("make", help="Make (e.g. Toyota)")
    add_car_parser.add_argument("model", help="Model (e.g. Corolla)")
    add_car_parser.add_argument("year", type=int, help="Model year")
    add_car_parser.add_argument("mileage", type=int, help="Current mileage (km)")
    add_car_parser.add_argument("--plate", help="License plate")
    add_car_parser.add_argument("--color", help="Color (default: Slate)")

    delete_car_parser = subparsers.add_parser(
        "delete-car", help="Delete a vehicle and all its records"
    )
    delete_car_parser.add_argument("car_id", help="Vehicle id or unique prefix")
    delete_car_parser.add_argument(
        "--yes", action="store_true", help="Skip the confirmation prompt"
    )

    # Maintenance subcommands
    history_parser = subparsers.add_parser("history", help="Show a vehicle's records")
    history_parser.add_argument("car_id", help="Vehicle id or unique prefix")

    log_parser = subparsers.add_parser("log", help="Add a maintenance record")
    log_parser.add_argument("car_id", help="Vehicle id or unique prefix")
    log_parser.add_argument("part", help="Part or service (e.g. 'Filtro de óleo')")
    log_parser.add_argument(
        "--type",
        type=parse_service_type,
        default=ServiceType.REPLACEMENT,
        help="replacement (default) or revision",
    )
    log_parser.add_argument(
        "--date",
        type=parse_record_date,
        help="Date in YYYY-MM-DD format (default: today)",
    )
    log_parser.add_argument(
        "--mileage", type=int, required=True, help="Vehicle mileage at the service"
    )
    log_parser.add_argument("--cost", type=float, help="Cost of the service")
    log_parser.add_argument("--notes", help="Notes about the service")
    log_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be added without saving",
    )

    edit_parser = subparsers.add_parser("edit", help="Edit a maintenance record")
    edit_parser.add_argument("record_id", help="Record id or unique prefix")
    edit_parser.add_argument("--part")
    edit_parser.add_argument("--type", type=parse_service_type)
    edit_parser.add_argument("--date", type=parse_record_date)
    edit_parser.add_argument("--mileage", type=int)
    edit_parser.add_argument("--cost", type=float)
    edit_parser.add_argument("--notes", help="New notes ('' clears them)")

    delete_record_parser = subparsers.add_parser(
        "delete-record", help="Delete a maintenance record"
    )
    delete_record_parser.add_argument("record_id", help="Record id or unique prefix")
    delete_record_parser.add_argument(
        "--yes", action="store_true", help="Skip the confirmation prompt"
    )

    # CSV subcommands
    export_parser = subparsers.add_parser("export", help="Export all records to CSV")
    export_parser.add_argument(
        "--output", type=Path, help="Output file (default: carlog_<user>_<date>.csv)"
    )

    import_parser = subparsers.add_parser("import", help="Import records from CSV")
    import_parser.add_argument("car_id", help="Vehicle that receives every record")
    import_parser.add_argument("file", type=Path, help="CSV file with a header line")

    # Stats and insight subcommands
    stats_parser = subparsers.add_parser("stats", help="Spending dashboard")
    stats_parser.add_argument(
        "--year", type=int, help="Year for the activity row (default: current)"
    )

    insight_parser = subparsers.add_parser("insight", help="AI maintenance summary")
    insight_parser.add_argument("car_id", help="Vehicle id or unique prefix")

    subparsers.add_parser("check-config", help="Validate the configuration file")

    return parser


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "check-config":
        return cmd_check_config(args, Config())

    try:
        config = load_config(args.config)
    except (yaml.YAMLError, ValidationError) as e:
        print(f"Error: invalid configuration: {getattr(e, 'message', e)}")
        return 1

    configure_logging("DEBUG" if args.verbose else config.log_level)

    try:
        return COMMANDS[args.command](args, config)
    except CarlogError as e:
        print(e.message)
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
