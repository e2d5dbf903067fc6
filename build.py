import os
import sys
import subprocess
import platform


def build():
    app_name = "GridCrop"
    main_script = "main.py"
    dist_dir = "dist"

    system = platform.system()
    # macOS gets an .app bundle, everything else a single executable
    bundle_flag = "--onedir" if system == "Darwin" else "--onefile"

    print(f"Building {app_name} for {system}...")

    data_sep = ";" if system == "Windows" else ":"

    # --windowed: No console window
    # --noconfirm: Overwrite existing dist folder
    # --clean: Clean cache before build
    cmd = [
        "uv", "run", "pyinstaller",
        bundle_flag,
        "--windowed",
        "--noconfirm",
        "--clean",
        "--name", app_name,
        main_script
    ]

    if os.path.exists("styles"):
        cmd.extend(["--add-data", f"styles{data_sep}styles"])

    try:
        subprocess.run(cmd, check=True)
        print(f"\nSuccessfully built {app_name}!")
        print(f"Output location: {os.path.abspath(dist_dir)}")
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        print(f"\nBuild failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    build()
