import os
import re
import logging
import concurrent.futures
from typing import Iterable, List, Optional, Union
from urllib.parse import urlsplit

import requests

logger = logging.getLogger(__name__)

LINE_SPLIT_RE = re.compile(r'\r?\n')
HOSTS_LINE_RE = re.compile(r'^(0\.0\.0\.0|127\.0\.0\.1)\s+')
DOMAIN_RE = re.compile(r'^[a-zA-Z0-9][a-zA-Z0-9-]{0,61}[a-zA-Z0-9]?\.')
COMMENT_PREFIXES = ('#', '!', '[')


# Check a single URL for basic well-formedness
def is_valid_url(url: str) -> bool:
    if re.search(r'\s', url):
        return False
    try:
        parts = urlsplit(url)
        # .port raises ValueError for a non-numeric or out of range port
        parts.port
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc and parts.hostname)


# Parse URLs from a newline separated string
def parse_urls(url_string: Optional[str]) -> List[str]:
    if not url_string or not isinstance(url_string, str):
        return []

    urls = []
    for line in LINE_SPLIT_RE.split(url_string):
        url = line.strip()
        if not url:
            continue
        if not is_valid_url(url):
            logger.warning("Invalid URL skipped: %s", url)
            continue
        urls.append(url)
    return urls


# Fetch one URL, None if the download failed
def fetch_text(url: str, timeout: Optional[float] = None) -> Optional[str]:
    logger.info("Downloading: %s", url)
    try:
        response = requests.get(url.strip(), timeout=timeout)
        response.raise_for_status()
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else "?"
        reason = e.response.reason if e.response is not None else e
        logger.error("Failed to download %s: %s %s", url, status, reason)
        return None
    except requests.RequestException as e:
        logger.error("Error downloading %s: %s", url, e)
        return None

    content = response.content.decode("utf-8", errors="replace")
    logger.info("Downloaded %s (%d bytes)", url, len(content))
    return content


# Download files from URLs and combine content
def download_files(urls: Union[str, Iterable[str], None], output_path: str,
                   workers: int = 1, timeout: Optional[float] = None) -> Optional[int]:
    """Fetch every URL in order and write the bodies, newline joined, to output_path.

    A raw string is run through parse_urls first; any other iterable is used
    as given. Failed downloads are logged and contribute nothing. Returns the
    number of bytes written, or None when there was nothing to download (the
    output file is left alone in that case). Errors writing the file propagate.
    """
    logger.info("Processing URLs: %s", urls)

    if urls is None or isinstance(urls, str):
        valid_urls = parse_urls(urls)
    else:
        valid_urls = list(urls)

    if not valid_urls:
        logger.warning("No valid URLs found to download")
        return None

    logger.info("Downloading from %d URLs...", len(valid_urls))

    if workers > 1:
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(lambda url: fetch_text(url, timeout), valid_urls))
    else:
        results = [fetch_text(url, timeout) for url in valid_urls]

    combined = "\n".join(content for content in results if content is not None)
    data = combined.encode('utf-8')

    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(output_path, "wb") as file:
        file.write(data)

    logger.info("Saved combined content to %s (%d bytes)", output_path, len(data))
    return len(data)


# Pull the domain token out of a single list line
def extract_domain(line: str) -> Optional[str]:
    line = line.strip()
    if not line or line.startswith(COMMENT_PREFIXES):
        return None

    domain = line
    if HOSTS_LINE_RE.match(line):
        domain = line.split()[1]
    elif line.startswith('||') and '^' in line:
        domain = line[2:line.index('^')]

    if not domain or not DOMAIN_RE.match(domain):
        return None
    return domain.lower()


# Read and parse domains from file
def parse_domains(file_path: str) -> List[str]:
    """Return the distinct lowercase domains found in a hosts, adblock or plain list.

    The order of the result is not defined. An unreadable file is logged and
    yields an empty list.
    """
    try:
        with open(file_path, "r", encoding="utf-8-sig", newline="") as file:
            content = file.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Error reading file %s: %s", file_path, e)
        return []

    domains = set()
    for line in LINE_SPLIT_RE.split(content):
        domain = extract_domain(line)
        if domain:
            domains.add(domain)
    return list(domains)
