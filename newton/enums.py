"""Type enumerations for contact sub-records.

Values are persisted as integers and follow the numbering of the Android
contacts provider. Every enumeration reserves ``CUSTOM`` for user-defined
types whose name travels in the record's ``label``.
"""

from enum import IntEnum


class EmailType(IntEnum):
    CUSTOM = 0
    HOME = 1
    WORK = 2
    OTHER = 3
    MOBILE = 4


class PhoneType(IntEnum):
    CUSTOM = 0
    HOME = 1
    MOBILE = 2
    WORK = 3
    FAX_WORK = 4
    FAX_HOME = 5
    PAGER = 6
    OTHER = 7
    CALLBACK = 8
    CAR = 9
    COMPANY_MAIN = 10
    ISDN = 11
    MAIN = 12
    OTHER_FAX = 13
    RADIO = 14
    TELEX = 15
    TTY_TDD = 16
    WORK_MOBILE = 17
    WORK_PAGER = 18
    ASSISTANT = 19
    MMS = 20


class IMType(IntEnum):
    CUSTOM = 0
    HOME = 1
    WORK = 2
    OTHER = 3


class IMProtocol(IntEnum):
    CUSTOM = -1
    AIM = 0
    MSN = 1
    YAHOO = 2
    SKYPE = 3
    QQ = 4
    HANGOUTS = 5
    ICQ = 6
    XMPP = 7
    NETMEETING = 8


class RelationType(IntEnum):
    CUSTOM = 0
    ASSISTANT = 1
    BROTHER = 2
    CHILD = 3
    DOMESTIC_PARTNER = 4
    FATHER = 5
    FRIEND = 6
    MANAGER = 7
    MOTHER = 8
    PARENT = 9
    PARTNER = 10
    REFERRED_BY = 11
    RELATIVE = 12
    SISTER = 13
    SPOUSE = 14


class PostalAddressType(IntEnum):
    CUSTOM = 0
    HOME = 1
    WORK = 2
    OTHER = 3


class EventType(IntEnum):
    CUSTOM = 0
    ANNIVERSARY = 1
    OTHER = 2
    BIRTHDAY = 3
