import logging
import os
import zipfile

import requests

import config

logger = logging.getLogger(__name__)


def ensure_vosk_model(final_dir: str = None, url: str = None) -> str:
    """Download and unpack the offline Vosk model unless it is already present."""
    final_dir = final_dir or config.VOSK_MODEL_PATH
    url = url or config.VOSK_MODEL_URL

    if os.path.exists(final_dir):
        logger.debug("Vosk model already present at '%s'", final_dir)
        return final_dir

    model_zip = final_dir.rstrip("/\\") + ".zip"
    extract_dir = os.path.dirname(os.path.abspath(final_dir))

    logger.info("Downloading Vosk model from %s", url)
    response = requests.get(url, stream=True, timeout=60)
    response.raise_for_status()
    with open(model_zip, "wb") as f:
        for chunk in response.iter_content(chunk_size=8192):
            f.write(chunk)

    try:
        with zipfile.ZipFile(model_zip, "r") as zip_ref:
            extracted_folder = zip_ref.namelist()[0].split("/")[0]
            zip_ref.extractall(extract_dir)
    finally:
        os.remove(model_zip)

    extracted_path = os.path.join(extract_dir, extracted_folder)
    if os.path.abspath(extracted_path) != os.path.abspath(final_dir):
        os.rename(extracted_path, final_dir)
    logger.info("Vosk model extracted to '%s'", final_dir)
    return final_dir


if __name__ == "__main__":
    config.configure_logging()
    path = ensure_vosk_model()
    print(f"Vosk model ready at '{path}'.")
