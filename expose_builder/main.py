#!/usr/bin/env python3
"""
Exposé Builder - Command Line Interface

Usage:
    expose-builder list
    expose-builder show <expose_id>
    expose-builder delete <expose_id>
    expose-builder copy <expose_id> "New label"
    expose-builder import --file exposes.csv
    expose-builder optimize photo1.jpg photo2.jpg --out-dir optimized/
    expose-builder export <expose_id> --output expose.pdf
"""
import argparse
import base64
import json
import logging
import sys
from pathlib import Path

from .api.config import Config
from .database.store import DuplicateFileNameError, ExposeStore, ExposeValidationError
from .export.pdf import render_pdf
from .images.processor import ImageProcessor
from .images.watermark import WatermarkStyle
from .models.expose import OptimizationSettings
from .services.assembly import RenderFlags, assemble
from .services.calculator import compute_derived
from .utils.importer import import_records, parse_data_file

LOGGER = logging.getLogger(__name__)


def configure_logging(level: str = None):
    """Root logging setup shared by the CLI and the dashboard"""
    logging.basicConfig(
        level=getattr(logging, (level or Config.LOG_LEVEL).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


def print_json(data, indent=2):
    """Pretty print JSON data"""
    print(json.dumps(data, indent=indent, ensure_ascii=False, default=str))


def progress_callback(current: int, total: int, status: str):
    """Progress callback for imports"""
    percentage = (current / total * 100) if total > 0 else 0
    bar_length = 30
    filled = int(bar_length * current / total) if total > 0 else 0
    bar = '█' * filled + '░' * (bar_length - filled)
    print(f"\r[{bar}] {percentage:.1f}% ({current}/{total}) - {status}", end='', flush=True)
    if current >= total:
        print()


def cmd_list(args, store: ExposeStore):
    """List saved exposés"""
    exposes = store.list()
    if args.json:
        print_json([e.summary() for e in exposes])
        return
    if not exposes:
        print("No saved exposés.")
        return
    for expose in exposes:
        print(f"{expose.id}  {expose.file_name:<40}  {expose.updated_at}  ({len(expose.photos)} photos)")


def cmd_show(args, store: ExposeStore):
    """Show one exposé with its derived figures"""
    expose = store.load(args.expose_id)
    if expose is None:
        print(f"Error: Exposé not found: {args.expose_id}")
        sys.exit(1)
    data = expose.summary()
    data['data'] = expose.data
    data['derived'] = compute_derived(expose.data).to_dict()
    print_json(data)


def cmd_delete(args, store: ExposeStore):
    """Delete an exposé"""
    if not args.yes:
        confirm = input(f"Are you sure you want to delete exposé {args.expose_id}? (yes/no): ")
        if confirm.lower() != 'yes':
            print("Cancelled.")
            return

    if store.delete(args.expose_id):
        print("✓ Exposé deleted successfully!")
    else:
        print(f"Error: Exposé not found: {args.expose_id}")
        sys.exit(1)


def cmd_copy(args, store: ExposeStore):
    """Copy an exposé under a new label"""
    try:
        new_id = store.copy(args.expose_id, args.label)
    except (ExposeValidationError, DuplicateFileNameError) as e:
        print(f"Error: {e.message}")
        sys.exit(1)

    if new_id is None:
        print(f"Error: Exposé not found: {args.expose_id}")
        sys.exit(1)
    print(f"✓ Copied to {new_id}")


def cmd_import(args, store: ExposeStore):
    """Import exposés from a JSON or CSV file"""
    file_path = Path(args.file)
    if not file_path.exists():
        print(f"Error: File not found: {file_path}")
        sys.exit(1)

    print(f"Processing file: {file_path}")
    print("-" * 40)
    rows = parse_data_file(file_path)
    result = import_records(store, rows, label=args.label, progress_callback=progress_callback)

    print("\n" + "=" * 40)
    print("IMPORT RESULTS")
    print("=" * 40)
    print(f"Total:      {result.total}")
    print(f"Successful: {result.successful}")
    print(f"Failed:     {result.failed}")

    if result.errors:
        print("\nFailed rows:")
        for error in result.errors:
            print(f"  - {error['reference']}: {error['error']}")

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump(result.to_dict(), f, indent=2, ensure_ascii=False, default=str)
        print(f"\nResults written to {args.output}")


def cmd_optimize(args, store: ExposeStore):
    """Run photos through the optimisation pipeline"""
    settings = OptimizationSettings.from_dict({
        'max_width': args.max_width,
        'max_height': args.max_height,
        'contrast_strength': args.contrast,
        'sharpen': not args.no_sharpen,
        'brightness': args.brightness,
    })
    watermark = WatermarkStyle(text=args.watermark) if args.watermark else None

    files = []
    for name in args.files:
        path = Path(name)
        if not path.exists():
            print(f"Warning: File not found: {path}")
            continue
        files.append((path.name, path.read_bytes()))

    result = ImageProcessor().process_batch(files, settings, watermark=watermark)

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    for i, data_uri in enumerate(result.assets, start=1):
        target = out_dir / f"photo_{i:02d}.jpg"
        target.write_bytes(base64.b64decode(data_uri.split(',', 1)[1]))
        print(f"✓ {target}")

    message = result.message(Config.LANGUAGE)
    if message:
        print(message)
    for failure in result.failures:
        print(f"  - {failure['name']}: {failure['error']}")


def cmd_export(args, store: ExposeStore):
    """Export an exposé as PDF"""
    expose = store.load(args.expose_id)
    if expose is None:
        print(f"Error: Exposé not found: {args.expose_id}")
        sys.exit(1)

    flags = RenderFlags(
        include_original_images=not args.no_gallery,
        show_agent_notices=not args.no_agent_notices,
        language=args.lang,
    )
    logo = None
    if args.logo:
        logo = Path(args.logo).read_bytes()
    model = assemble(expose.data, expose.photos, logo=logo, theme=args.theme, flags=flags)

    output = Path(args.output or f"{expose.file_name}.pdf")
    output.write_bytes(render_pdf(model))
    print(f"✓ PDF written to {output}")


def main(argv=None):
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description='Exposé Builder',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Import drafts from a CSV export
  expose-builder import --file exposes.csv --label "Import März"

  # Optimise photos with a watermark
  expose-builder optimize *.jpg --out-dir optimized --watermark "Muster Immobilien"

  # Export a draft as PDF without agent notices
  expose-builder export EXPOSE_ID --output expose.pdf --no-agent-notices
        """
    )

    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--database', help='Database URL (overrides .env)')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    list_parser = subparsers.add_parser('list', help='List saved exposés')
    list_parser.add_argument('--json', action='store_true', help='Print as JSON')

    show_parser = subparsers.add_parser('show', help='Show an exposé')
    show_parser.add_argument('expose_id', help='Exposé ID')

    delete_parser = subparsers.add_parser('delete', help='Delete an exposé')
    delete_parser.add_argument('expose_id', help='Exposé ID')
    delete_parser.add_argument('--yes', '-y', action='store_true', help='Do not ask for confirmation')

    copy_parser = subparsers.add_parser('copy', help='Copy an exposé under a new label')
    copy_parser.add_argument('expose_id', help='Exposé ID')
    copy_parser.add_argument('label', help='Label of the copy')

    import_parser = subparsers.add_parser('import', help='Import exposés from file')
    import_parser.add_argument('--file', '-f', required=True, help='JSON or CSV file path')
    import_parser.add_argument('--label', '-l', help='Label for rows without one')
    import_parser.add_argument('--output', '-o', help='Output file for results')

    optimize_parser = subparsers.add_parser('optimize', help='Optimise photos')
    optimize_parser.add_argument('files', nargs='+', help='Image files')
    optimize_parser.add_argument('--out-dir', '-o', default='optimized', help='Output directory')
    optimize_parser.add_argument('--max-width', type=int, default=Config.MAX_WIDTH)
    optimize_parser.add_argument('--max-height', type=int, default=Config.MAX_HEIGHT)
    optimize_parser.add_argument('--contrast', type=float, default=0.9, help='Auto-level strength 0..1')
    optimize_parser.add_argument('--brightness', type=int, default=0, help='Brightness -50..50')
    optimize_parser.add_argument('--no-sharpen', action='store_true', help='Skip sharpening')
    optimize_parser.add_argument('--watermark', '-w', help='Watermark text')

    export_parser = subparsers.add_parser('export', help='Export an exposé as PDF')
    export_parser.add_argument('expose_id', help='Exposé ID')
    export_parser.add_argument('--output', '-o', help='PDF file (default: <file name>.pdf)')
    export_parser.add_argument('--theme', choices=['blue', 'neutral'], default=Config.DEFAULT_THEME)
    export_parser.add_argument('--lang', choices=['de', 'en'], default=Config.LANGUAGE)
    export_parser.add_argument('--logo', help='Logo image file')
    export_parser.add_argument('--no-gallery', action='store_true', help='Leave out the gallery pages')
    export_parser.add_argument('--no-agent-notices', action='store_true', help='Leave out agent notices')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    configure_logging('DEBUG' if args.debug else None)

    if not Config.validate():
        print("\nPlease fix the configuration in the .env file")
        sys.exit(1)

    commands = {
        'list': cmd_list,
        'show': cmd_show,
        'delete': cmd_delete,
        'copy': cmd_copy,
        'import': cmd_import,
        'optimize': cmd_optimize,
        'export': cmd_export,
    }

    # optimize works on files only and needs no database
    store = None if args.command == 'optimize' else ExposeStore(url=args.database)
    commands[args.command](args, store)


if __name__ == '__main__':
    main()
