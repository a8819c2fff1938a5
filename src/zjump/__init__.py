"""Frecency-ranked directory database with fuzzy jumping.

Data file (CSV, default ~/.z):
    path,rank,time
    /home/alice/src/zjump,14,1760000000

Every directory change bumps the visited path's rank; once the total rank
passes 9000 all ranks decay by 1% and records below rank 1 are dropped.
Queries match ordered fragments against stored paths, case-sensitively first,
and prefer a common parent of all matches over the single best one.
"""

from zjump.config import ZConfig, init_config, load_config
from zjump.errors import InvalidPath, NoMatch, StoreIsDirectory, StoreUnreadable, ZjumpError
from zjump.matcher import MatchResult, match
from zjump.models import Record
from zjump.resolver import choose_target, common_root
from zjump.scoring import Policy, score
from zjump.store import RecordStore
from zjump.tracker import record_visit

__all__ = [
    "InvalidPath",
    "MatchResult",
    "NoMatch",
    "Policy",
    "Record",
    "RecordStore",
    "StoreIsDirectory",
    "StoreUnreadable",
    "ZConfig",
    "ZjumpError",
    "choose_target",
    "common_root",
    "init_config",
    "load_config",
    "match",
    "record_visit",
    "score",
]
