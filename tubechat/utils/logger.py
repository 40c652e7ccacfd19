import os
import sys
import logging

from tubechat.config import config

logging_str = "[%(asctime)s] {%(pathname)s:%(lineno)d} %(levelname)s - %(message)s"
logging_dir = os.path.join(config.BASE_DIR, "logs")
logging_path = os.path.join(logging_dir, "tubechatlogger.log")
if not os.path.exists(logging_dir):
    os.makedirs(logging_dir)
logging.basicConfig(
    level=logging.INFO,
    format=logging_str,
    handlers=[
        logging.FileHandler(logging_path),
        logging.StreamHandler(sys.stdout)
    ]
)

logging = logging.getLogger('tubechat')
logging.setLevel(config.LOG_LEVEL)
