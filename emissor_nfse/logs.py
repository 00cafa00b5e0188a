import datetime
import logging
import os


def configurar_log(log_dir: str, level: int = logging.INFO) -> str:
    """Send the log records to a new timestamped file under ``log_dir``.

    Returns the path of the log file.
    """
    os.makedirs(log_dir, exist_ok=True)
    log_name = os.path.join(
        log_dir, f"log_nfse_{datetime.datetime.now().strftime('%Y%m%d_%H%M%S')}.txt"
    )
    logging.basicConfig(
        filename=log_name,
        level=level,
        format="%(asctime)s %(levelname)s: %(message)s",
    )
    return log_name
