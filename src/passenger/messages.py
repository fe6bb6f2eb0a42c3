"""User messages for the Passenger CLI."""

# Success messages
SUCCESS_REGISTERED = "Registered vault of '{owner}'."
SUCCESS_RESET = "Master passphrase changed."
SUCCESS_CREATED = "Created entry '{platform}' ({id})."
SUCCESS_UPDATED = "Updated entry '{platform}'."
SUCCESS_DELETED = "Deleted entry '{id}'."
SUCCESS_DECLARED = "Declared constant '{key}'."
SUCCESS_MODIFIED = "Modified constant '{key}'."
SUCCESS_FORGOTTEN = "Forgot constant '{key}'."
SUCCESS_IMPORTED = "Imported {count} entry(ies) from {browser}."
SUCCESS_EXPORTED = "Exported {count} entry(ies) to '{path}'."

# Error messages
ERROR_MUTUALLY_EXCLUSIVE_GEN = (
    "Cannot use --generate together with --passphrase. "
    "Provide either a passphrase or --generate."
)
ERROR_FILE_EXISTS = "File '{path}' already exists. Use --force to overwrite."
ERROR_FILE_NOT_FOUND = "File '{path}' not found."
ERROR_SKIPPED_ROW = "Skipped row {row} ({platform}): {error}"

# Info messages
INFO_NO_ENTRIES = "No entries found."
INFO_NO_MATCHES = "No entries found matching '{query}'."
INFO_NO_CONSTANTS = "No constants declared."
INFO_NOTHING_DELETED = "No entry '{id}', nothing deleted."
INFO_CLIPBOARD_UNAVAILABLE = "Clipboard unavailable"
WARNING_PLAINTEXT_EXPORT = "The exported file contains passphrases in plaintext."
