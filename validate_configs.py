import sys
from pathlib import Path
from binfetch.config.parser import load_options
from binfetch.core.exceptions import BinFetchError
from binfetch.core.platform import HostPlatform
from binfetch.fetcher import build_save_name, resolve_target, resolve_urls


def validate_all():
    base_path = Path("examples")
    config_files = sorted(base_path.glob("*.yaml"))

    if not config_files:
        print("No configuration files found!")
        sys.exit(1)

    print(f"Found {len(config_files)} configuration files.")

    has_errors = False
    for config_file in config_files:
        try:
            options = load_options(config_file)

            # Resolve for every platform a target is declared for
            for target in options.targets:
                host = HostPlatform(target.os, target.arch or "x86_64")
                resolved = resolve_target(options.targets, host)
                urls = resolve_urls(options, resolved, host)
                name = build_save_name(
                    options.name,
                    host,
                    target=resolved,
                    targets=options.targets,
                    version=options.version,
                    add_name_os=options.add_name_os,
                    add_name_vers=options.add_name_vers,
                )
                print(f"  {host}: {urls.url} -> {name}")

            print(f"✅ {config_file.name}")

        except BinFetchError as e:
            print(f"❌ {config_file.name}: {e}")
            has_errors = True

    if has_errors:
        sys.exit(1)
    else:
        print("All configurations valid.")
        sys.exit(0)


if __name__ == "__main__":
    validate_all()
