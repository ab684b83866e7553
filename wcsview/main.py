import argparse


def build_parser():
    parser = argparse.ArgumentParser(
        prog="wcsview", description="FITS image viewer with WCS-aligned orientation"
    )
    parser.add_argument("file", nargs="?", help="FITS file to open")
    parser.add_argument(
        "--hdu", type=int, default=None, help="HDU index (default: first image HDU)"
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    # GUI imports stay here so the parser can be used without a display
    from wcsview.core import Manager

    manager = Manager(args)
    manager.start()


if __name__ == "__main__":
    main()
