"""Constants describing the NSKeyedArchiver plist layout."""

from __future__ import annotations

ARCHIVER_KEY = "$archiver"
VERSION_KEY = "$version"
TOP_KEY = "$top"
OBJECTS_KEY = "$objects"

ARCHIVER_NAME = "NSKeyedArchiver"
ARCHIVER_VERSION = 100000

NULL_MARKER = "$null"
ROOT_KEY = "root"

CLASS_KEY = "$class"
CLASSNAME_KEY = "$classname"
CLASSES_KEY = "$classes"

NS_OBJECTS = "NS.objects"
NS_KEYS = "NS.keys"
NS_STRING = "NS.string"
NS_TIME = "NS.time"
NS_BYTES = "NS.bytes"
NS_UUIDBYTES = "NS.uuidbytes"

ARRAY_CLASSES = frozenset({"NSArray", "NSMutableArray"})
SET_CLASSES = frozenset({"NSSet", "NSMutableSet"})
DICTIONARY_CLASSES = frozenset({"NSDictionary", "NSMutableDictionary"})
STRING_CLASSES = frozenset({"NSString", "NSMutableString"})
DATA_CLASSES = frozenset({"NSData", "NSMutableData"})
DATE_CLASS = "NSDate"
UUID_CLASS = "NSUUID"

# Class chains written for the containers we archive ourselves.
CLASS_HIERARCHIES: dict[str, tuple[str, ...]] = {
    "NSArray": ("NSArray", "NSObject"),
    "NSSet": ("NSSet", "NSObject"),
    "NSDictionary": ("NSDictionary", "NSObject"),
    "NSDate": ("NSDate", "NSObject"),
    "NSUUID": ("NSUUID", "NSObject"),
}

# Plist integers are limited to what the binary format can store.
MIN_PLIST_INT = -(2**63)
MAX_PLIST_INT = 2**64 - 1
