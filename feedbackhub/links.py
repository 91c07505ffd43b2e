# feedbackhub/links.py
LOCAL_HOSTS = ("localhost", "127.0.0.1")


def _strip_port(host: str) -> str:
    name, sep, port = host.rpartition(":")
    if sep and port.isdigit():
        return name
    return host


def build_link(host: str, prompt_id: str) -> str:
    """
    Public share URL for a prompt.

    Local development hosts (localhost / 127.0.0.1, any port) get plain http;
    every other host gets https.
    """
    protocol = "http" if _strip_port(host) in LOCAL_HOSTS else "https"
    return f"{protocol}://{host}/feedback/{prompt_id}"
