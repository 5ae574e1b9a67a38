"""
CLI entry point for mesh_formats
"""

import argparse
import logging
import sys
from pathlib import Path


def setup_logging(verbose=False, log_file=None):
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=handlers,
        force=True
    )


def build_parser():
    parser = argparse.ArgumentParser(
        prog="mesh_formats",
        description="MD2 / STL mesh decoder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print mesh statistics for a model
  python -m mesh_formats inspect models/tris.md2 --config decoder.json

  # Write frame 3 of an MD2 model as binary STL
  python -m mesh_formats convert models/tris.md2 tris.stl --frame 3

  # Create configuration template
  python -m mesh_formats create-config --output decoder.json
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    inspect_parser = subparsers.add_parser('inspect', help='Decode a model and print mesh statistics')
    inspect_parser.add_argument('file', help='MD2 or STL file')
    inspect_parser.add_argument('--config', help='Decoder configuration file (JSON)')
    inspect_parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')
    inspect_parser.add_argument('--log-file', help='Also write log output to this file')

    convert_parser = subparsers.add_parser('convert', help='Decode a model and write one mesh as binary STL')
    convert_parser.add_argument('file', help='MD2 or STL file')
    convert_parser.add_argument('output', help='Output binary STL path')
    convert_parser.add_argument('--frame', type=int, default=0, help='Mesh (MD2 frame) index to write (default: 0)')
    convert_parser.add_argument('--config', help='Decoder configuration file (JSON)')
    convert_parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')
    convert_parser.add_argument('--log-file', help='Also write log output to this file')

    config_parser = subparsers.add_parser('create-config', help='Create configuration template')
    config_parser.add_argument('--output', default='mesh_formats.json', help='Output config file name')

    return parser


def main(argv=None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(getattr(args, 'verbose', False), getattr(args, 'log_file', None))
    logger = logging.getLogger('mesh_formats.cli')

    try:
        if args.command == 'inspect':
            from .config import load_config
            from .importer import MeshImporter

            importer = MeshImporter(load_config(args.config))
            meshes = importer.read_file(args.file)
            for index, mesh in enumerate(meshes):
                info = mesh.summary()
                print(f"[{index}] {info['name']}: {info['vertices']} vertices, {info['faces']} faces, "
                      f"color={info['color']}{' (file)' if info['has_custom_color'] else ''}, "
                      f"bbox={info['bbox_min']} .. {info['bbox_max']}")

        elif args.command == 'convert':
            from .config import load_config
            from .importer import MeshImporter
            from .stl import encode_binary_stl

            meshes = MeshImporter(load_config(args.config)).read_file(args.file)
            if not 0 <= args.frame < len(meshes):
                logger.error(f"❌ Mesh index {args.frame} out of range (0..{len(meshes) - 1})")
                return 1
            mesh = meshes[args.frame]
            Path(args.output).write_bytes(encode_binary_stl(mesh, header=mesh.name.encode("latin-1", "replace")))
            logger.info(f"✅ Wrote {mesh.num_faces} facets to {args.output}")

        elif args.command == 'create-config':
            from .config import create_config_template

            create_config_template(Path(args.output))
            logger.info(f"✅ Created configuration template: {args.output}")

        return 0

    except Exception as e:
        logger.error(f"❌ Error: {e}")
        if getattr(args, 'verbose', False):
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
