import sys, argparse, uuid
from typing import Optional

from pydantic import ValidationError

from core_config import get_settings
from core_logging import get_logger, log_stage, bind_run_id, record_error, emit_run_summary, reset_run
from keygen import __version__
from keygen.errors import ConfigError, KeygenError
from keygen.models import ExportFormat, NamingScheme
from keygen.pipeline import ExportOptions, run_export
from keygen.scheme import KeySchemeAdapter, load_scheme

logger = get_logger("keygen")

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _parse_bool(value: str) -> bool:
    v = str(value).strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise argparse.ArgumentTypeError(f"expected true/false, got {value!r}")


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if n <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {n}")
    return n


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser("keygen", description="Generate hash-based signature keys for validators.")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = ap.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate validator key pairs into a directory.")
    gen.add_argument("--num-validators", "--num-keys", dest="num_validators", type=_positive_int, required=True,
                     help="Number of key pairs to generate.")
    gen.add_argument("--log-num-active-epochs", type=int, required=True,
                     help="Log2 of the number of active epochs (e.g. 18 for 2^18).")
    gen.add_argument("--output-dir", required=True, help="Directory to save the keys to.")
    gen.add_argument("--export-format", choices=[f.value for f in ExportFormat], default=None,
                     help="'ssz' writes binary only; 'both' adds legacy JSON (default: both).")
    gen.add_argument("--create-manifest", type=_parse_bool, nargs="?", const=True, default=None,
                     help="Write validator-keys-manifest.yaml (default: true).")
    gen.add_argument("--new-format", type=_parse_bool, nargs="?", const=True, default=None,
                     help="Name files by public-key bytes instead of index (default: false).")
    gen.add_argument("--scheme", default=None,
                     help="Scheme backend as module:attribute (default: KEYGEN_SCHEME).")
    return ap


def _options_from(args: argparse.Namespace, settings) -> ExportOptions:
    new_format = settings.new_format if args.new_format is None else args.new_format
    try:
        return ExportOptions(
            num_validators=args.num_validators,
            log_num_active_epochs=args.log_num_active_epochs,
            output_dir=args.output_dir,
            export_format=args.export_format or settings.export_format,
            create_manifest=settings.create_manifest if args.create_manifest is None else args.create_manifest,
            naming=NamingScheme.from_new_format(new_format),
            manifest_name=settings.manifest_name,
        )
    except ValidationError as exc:
        problems = "; ".join(f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors())
        raise ConfigError(f"invalid options: {problems}", where="cli.options") from exc


def run_generate(args: argparse.Namespace) -> int:
    try:
        settings = get_settings()
    except ValidationError as exc:
        raise ConfigError(f"invalid settings: {exc}", where="cli.settings") from exc
    get_logger("keygen", settings.service_log_level)
    options = _options_from(args, settings)
    scheme = load_scheme(args.scheme or settings.keygen_scheme)
    adapter = KeySchemeAdapter(scheme)

    print(
        f"Generating {options.num_validators} keys with 2^{options.log_num_active_epochs} "
        f"active epochs in directory: {options.output_dir}\n"
    )
    result = run_export(options, adapter, progress=lambda i: print(f"Generating key {i}..."))
    # human-friendly line for scripts/CI that don't parse structured logs
    print(f"\nSuccessfully generated and saved {result.num_keys} key pairs.")
    if result.manifest_path is not None:
        print(f"Manifest: {result.manifest_path}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = build_parser().parse_args(argv)

    reset_run()
    bind_run_id(uuid.uuid4().hex[:16])
    try:
        rc = run_generate(args)
    except KeygenError as e:
        # Fail fast on first error; files already written stay on disk
        record_error(e.code.value, where=e.where, message=str(e), logger=logger, stage="keygen")
        print(f"ERROR: {e}", file=sys.stderr)
        rc = e.exit_code
    else:
        log_stage(logger, "keygen", "completed")
    finally:
        emit_run_summary(logger)
        bind_run_id(None)
    return rc


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
