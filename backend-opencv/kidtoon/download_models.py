import logging
import urllib.request
from pathlib import Path

from .config import settings

logger = logging.getLogger(__name__)

MODEL_BASE_URL = 'https://raw.githubusercontent.com/smahesh29/Gender-and-Age-Detection/master'

# Levi & Hassner age/gender Caffe models, read by cv2.dnn
MODEL_FILES = {
    'age_deploy.prototxt': f'{MODEL_BASE_URL}/age_deploy.prototxt',
    'age_net.caffemodel': f'{MODEL_BASE_URL}/age_net.caffemodel',
    'gender_deploy.prototxt': f'{MODEL_BASE_URL}/gender_deploy.prototxt',
    'gender_net.caffemodel': f'{MODEL_BASE_URL}/gender_net.caffemodel',
}

def download_file(url, filename):
    logger.info(f"Downloading {filename}...")
    urllib.request.urlretrieve(url, filename)
    logger.info(f"Downloaded {filename}")

def main(models_dir=None):
    # Create models directory if it doesn't exist
    models_dir = Path(models_dir or settings.models_dir)
    models_dir.mkdir(parents=True, exist_ok=True)

    # Download each model file
    for filename, url in MODEL_FILES.items():
        filepath = models_dir / filename
        if not filepath.exists():
            try:
                download_file(url, str(filepath))
            except Exception as e:
                logger.error(f"Error downloading {filename}: {str(e)}")
                logger.error(
                    f"Please download the model files manually and place them in {models_dir}: "
                    + ", ".join(MODEL_FILES)
                )
                return False
    return True

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
