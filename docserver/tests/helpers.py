import os


def write_file(folder, path, content):
    """Create ``path`` below ``folder`` with ``content`` (str or bytes)."""
    filesystem_path = os.path.join(folder, *path.strip("/").split("/"))
    os.makedirs(os.path.dirname(filesystem_path), exist_ok=True)
    if isinstance(content, str):
        content = content.encode("utf-8")
    with open(filesystem_path, "wb") as f:
        f.write(content)
    return filesystem_path


def read_file(folder, path):
    with open(os.path.join(folder, *path.strip("/").split("/")), "rb") as f:
        return f.read()


def configuration_to_dict(configuration):
    return {section: {option: configuration.get_raw(section, option)
                      for option in configuration.options(section)}
            for section in configuration.sections()}
