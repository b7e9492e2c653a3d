# Server command verbs

ADD = "FT.ADD"
DEL = "FT.DEL"
GET = "FT.GET"
MGET = "FT.MGET"
SEARCH = "FT.SEARCH"
EXPLAIN = "FT.EXPLAIN"
AGGREGATE = "FT.AGGREGATE"
CURSOR = "FT.CURSOR"
CREATE = "FT.CREATE"
DROPINDEX = "FT.DROPINDEX"
INFO = "FT.INFO"
ALIASADD = "FT.ALIASADD"
ALIASDEL = "FT.ALIASDEL"
ALIASUPDATE = "FT.ALIASUPDATE"
DICTADD = "FT.DICTADD"
DICTDEL = "FT.DICTDEL"
DICTDUMP = "FT.DICTDUMP"
