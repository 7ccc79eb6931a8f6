# setup_fonts.py

import logging
import os
import shutil
import urllib.request
import zipfile

import config

logger = logging.getLogger(__name__)

# --- Constants for Font Setup ---
# (family, style) -> TTF file name inside the DejaVu release archive
REQUIRED_FONTS = {
    ('DejaVuSans', ''): "DejaVuSans.ttf",
    ('DejaVuSans', 'B'): "DejaVuSans-Bold.ttf",
    ('DejaVuSans', 'I'): "DejaVuSans-Oblique.ttf",
    ('DejaVuSans', 'BI'): "DejaVuSans-BoldOblique.ttf",
    ('DejaVuSerif', ''): "DejaVuSerif.ttf",
    ('DejaVuSerif', 'B'): "DejaVuSerif-Bold.ttf",
    ('DejaVuSerif', 'I'): "DejaVuSerif-Italic.ttf",
    ('DejaVuSerif', 'BI'): "DejaVuSerif-BoldItalic.ttf",
}

# URL for a specific stable release ZIP file from GitHub
FONT_URL = "https://github.com/dejavu-fonts/dejavu-fonts/releases/download/version_2_37/dejavu-fonts-ttf-2.37.zip"


def font_paths(font_dir=None):
    font_dir = font_dir or config.FONT_DIR
    return {key: os.path.join(font_dir, fname) for key, fname in REQUIRED_FONTS.items()}


def installed_font_paths(font_dir=None):
    """Returns {(family, style): path} when every required TTF is present in font_dir, else None."""
    paths = font_paths(font_dir)
    if all(os.path.exists(path) for path in paths.values()):
        return paths
    return None


def setup_fonts(force_download=False, font_dir=None):
    """Checks for the DejaVu Sans/Serif families and downloads them if missing. Returns True when all are installed."""
    font_dir = font_dir or config.FONT_DIR
    logger.info("--- Checking/Setting up PDF fonts (DejaVu Sans + Serif) ---")
    os.makedirs(font_dir, exist_ok=True)

    if installed_font_paths(font_dir) and not force_download:
        logger.info("Required DejaVu fonts found.")
        return True

    zip_path = os.path.join(font_dir, 'dejavu-fonts-temp.zip')
    targets = font_paths(font_dir)
    if force_download:
        logger.info("Forcing download/reinstallation of fonts...")
        for path in targets.values():
            if os.path.exists(path): os.remove(path)
    else:
        logger.info("One or more DejaVu fonts not found. Attempting download...")

    # --- Download ---
    try:
        logger.info(f"Downloading fonts archive from {FONT_URL}...")
        req = urllib.request.Request(FONT_URL, headers={'User-Agent': 'Mozilla/5.0'})
        with urllib.request.urlopen(req) as response, open(zip_path, 'wb') as out_file:
            if response.status != 200: raise OSError(f"Download failed: HTTP {response.status}")
            shutil.copyfileobj(response, out_file)
    except OSError as e:
        logger.error(f"Failed to download fonts: {e}")
        if os.path.exists(zip_path): os.remove(zip_path)
        return False

    # --- Extract only the TTFs we need, flattening the archive's ttf/ directory ---
    try:
        wanted = {fname: targets[key] for key, fname in REQUIRED_FONTS.items()}
        with zipfile.ZipFile(zip_path, 'r') as archive:
            for member in archive.namelist():
                dest_path = wanted.get(os.path.basename(member))
                if dest_path is None:
                    continue
                with archive.open(member) as src, open(dest_path, 'wb') as dst:
                    shutil.copyfileobj(src, dst)
                logger.info(f"Installed {os.path.basename(member)} into {font_dir}")
    except (OSError, zipfile.BadZipFile) as e:
        logger.error(f"Failed to extract fonts: {e}")
    finally:
        if os.path.exists(zip_path):
            try: os.remove(zip_path)
            except OSError as e: logger.warning(f"Could not remove {zip_path}: {e}")

    missing = [fname for key, fname in REQUIRED_FONTS.items() if not os.path.exists(targets[key])]
    if missing:
        logger.error(f"Font installation incomplete. Missing: {', '.join(missing)}")
        return False
    logger.info(f"All {len(REQUIRED_FONTS)} required fonts installed/verified.")
    return True


# Allow running this script directly for setup/update
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    if setup_fonts(force_download=True): logger.info("Font setup completed successfully.")
    else: logger.error("Font setup failed.")
