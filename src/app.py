def old_name():
    return "old_name"
