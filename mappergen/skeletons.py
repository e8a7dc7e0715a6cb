# File: mappergen/skeletons.py
"""
Test-spec skeletons, one per (test framework, execution mode).

Placeholders substituted by the assembly engine:

    %package%        target package
    %className%      generated class name
    %primaryKeys%    literal key arguments for ``find``
    %syntaxObject%   alias declaration (query-DSL style only)
    %whereExample%   example predicate on the first key column
    %createFields%   literal arguments for ``create``
    %timeImport%     a line replaced by the date/time import lines
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from mappergen.models import ExecutionMode, TestTemplate

logger: logging.Logger = logging.getLogger("mappergen.skeletons")

TIME_IMPORT_PLACEHOLDER: str = "%timeImport%"

PLACEHOLDERS: Tuple[str, ...] = (
    "%package%",
    "%className%",
    "%primaryKeys%",
    "%syntaxObject%",
    "%whereExample%",
    "%createFields%",
)

_FLAT_SPEC_SYNC: str = """\
package %package%

import org.scalatest._
import scalikejdbc.scalatest.AutoRollback
import scalikejdbc._
%timeImport%

class %className%Spec extends fixture.FlatSpec with Matchers with AutoRollback {
  %syntaxObject%

  behavior of "%className%"

  it should "find by primary keys" in { implicit session =>
    val maybeFound = %className%.find(%primaryKeys%)
    maybeFound.isDefined should be(true)
  }
  it should "find by where clauses" in { implicit session =>
    val maybeFound = %className%.findBy(%whereExample%)
    maybeFound.isDefined should be(true)
  }
  it should "find all records" in { implicit session =>
    val allResults = %className%.findAll()
    allResults.size should be >(0)
  }
  it should "count all records" in { implicit session =>
    val count = %className%.countAll()
    count should be >(0L)
  }
  it should "find all by where clauses" in { implicit session =>
    val results = %className%.findAllBy(%whereExample%)
    results.size should be >(0)
  }
  it should "count by where clauses" in { implicit session =>
    val count = %className%.countBy(%whereExample%)
    count should be >(0L)
  }
  it should "create new record" in { implicit session =>
    val created = %className%.create(%createFields%)
    created should not be(null)
  }
  it should "save a record" in { implicit session =>
    val entity = %className%.findAll().head
    // TODO modify something
    val modified = entity
    val updated = %className%.save(modified)
    updated should not equal(entity)
  }
  it should "destroy a record" in { implicit session =>
    val entity = %className%.findAll().head
    %className%.destroy(entity)
    val shouldBeNone = %className%.find(%primaryKeys%)
    shouldBeNone.isDefined should be(false)
  }

}
"""

_FLAT_SPEC_ASYNC: str = """\
package %package%

import org.scalatest._
import org.scalatest.concurrent.Futures
import org.scalatest.concurrent.ScalaFutures._
import scalikejdbc.scalatest.AutoRollback
import scalikejdbc._
%timeImport%

class %className%Spec extends fixture.FlatSpec with Matchers with Futures with AutoRollback {
  %syntaxObject%

  behavior of "%className%"

  it should "find by primary keys" in { implicit session =>
    val maybeFound = %className%.find(%primaryKeys%)
    maybeFound.futureValue should not be empty
  }
  it should "find by where clauses" in { implicit session =>
    val maybeFound = %className%.findBy(%whereExample%)
    maybeFound.futureValue should not be empty
  }
  it should "find all records" in { implicit session =>
    val allResults = %className%.findAll()
    allResults.futureValue.size should be > 0
  }
  it should "count all records" in { implicit session =>
    val count = %className%.countAll()
    count.futureValue should be > 0L
  }
  it should "find all by where clauses" in { implicit session =>
    val results = %className%.findAllBy(%whereExample%)
    results.futureValue.size should be > 0
  }
  it should "count by where clauses" in { implicit session =>
    val count = %className%.countBy(%whereExample%)
    count.futureValue should be > 0L
  }
  it should "create new record" in { implicit session =>
    val created = %className%.create(%createFields%)
    created.futureValue should not be null
  }
  it should "save a record" in { implicit session =>
    val entity = %className%.findAll().futureValue.head
    // TODO modify something
    val modified = entity
    val updated = %className%.save(modified)
    updated.futureValue should not equal entity
  }
  it should "destroy a record" in { implicit session =>
    val entity = %className%.findAll().futureValue.head
    %className%.destroy(entity).futureValue
    val shouldBeNone = %className%.find(%primaryKeys%)
    shouldBeNone.futureValue should be(empty)
  }

}
"""

_SPECS2_UNIT_SYNC: str = """\
package %package%

import scalikejdbc.specs2.mutable.AutoRollback
import org.specs2.mutable._
import scalikejdbc._
%timeImport%

class %className%Spec extends Specification {

  "%className%" should {

    %syntaxObject%

    "find by primary keys" in new AutoRollback {
      val maybeFound = %className%.find(%primaryKeys%)
      maybeFound.isDefined should beTrue
    }
    "find by where clauses" in new AutoRollback {
      val maybeFound = %className%.findBy(%whereExample%)
      maybeFound.isDefined should beTrue
    }
    "find all records" in new AutoRollback {
      val allResults = %className%.findAll()
      allResults.size should be_>(0)
    }
    "count all records" in new AutoRollback {
      val count = %className%.countAll()
      count should be_>(0L)
    }
    "find all by where clauses" in new AutoRollback {
      val results = %className%.findAllBy(%whereExample%)
      results.size should be_>(0)
    }
    "count by where clauses" in new AutoRollback {
      val count = %className%.countBy(%whereExample%)
      count should be_>(0L)
    }
    "create new record" in new AutoRollback {
      val created = %className%.create(%createFields%)
      created should not beNull
    }
    "save a record" in new AutoRollback {
      val entity = %className%.findAll().head
      // TODO modify something
      val modified = entity
      val updated = %className%.save(modified)
      updated should not equalTo(entity)
    }
    "destroy a record" in new AutoRollback {
      val entity = %className%.findAll().head
      %className%.destroy(entity)
      val shouldBeNone = %className%.find(%primaryKeys%)
      shouldBeNone.isDefined should beFalse
    }
  }

}
"""

_SPECS2_UNIT_ASYNC: str = """\
package %package%

import scalikejdbc.specs2.mutable.AutoRollback
import org.specs2.mutable._
import scalikejdbc._

import scala.concurrent._
import scala.concurrent.duration._
%timeImport%

class %className%Spec extends Specification {

  "%className%" should {

    %syntaxObject%

    "find by primary keys" in new AutoRollback {
      val maybeFound = %className%.find(%primaryKeys%)
      maybeFound should beSome[%className%].await
    }
    "find by where clauses" in new AutoRollback {
      val maybeFound = %className%.findBy(%whereExample%)
      maybeFound should beSome[%className%].await
    }
    "find all records" in new AutoRollback {
      val allResults = %className%.findAll()
      allResults.map(_.size) should be_>(0).await
    }
    "count all records" in new AutoRollback {
      val count = %className%.countAll()
      count should be_>(0L).await
    }
    "find all by where clauses" in new AutoRollback {
      val results = %className%.findAllBy(%whereExample%)
      results.map(_.size) should be_>(0).await
    }
    "count by where clauses" in new AutoRollback {
      val count = %className%.countBy(%whereExample%)
      count should be_>(0L).await
    }
    "create new record" in new AutoRollback {
      val created = %className%.create(%createFields%)
      created should not (beNull.eventually)
    }
    "save a record" in new AutoRollback {
      val entity = Await.result(%className%.findAll(), Duration.Inf).head
      // TODO modify something
      val modified = entity
      val updated = %className%.save(modified)
      updated should not (equalTo(entity).eventually)
    }
    "destroy a record" in new AutoRollback {
      val entity = Await.result(%className%.findAll(), Duration.Inf).head
      Await.result(%className%.destroy(entity), Duration.Inf)
      val shouldBeNone = %className%.find(%primaryKeys%)
      shouldBeNone should beNone.await
    }
  }

}
"""

_SPECS2_ACCEPTANCE_SYNC: str = """\
package %package%

import scalikejdbc.specs2.AutoRollback
import org.specs2._
import scalikejdbc._
%timeImport%

class %className%Spec extends Specification { def is =

  "The '%className%' model should" ^
    "find by primary keys"         ! autoRollback().findByPrimaryKeys ^
    "find by where clauses"        ! autoRollback().findBy ^
    "find all records"             ! autoRollback().findAll ^
    "count all records"            ! autoRollback().countAll ^
    "find all by where clauses"    ! autoRollback().findAllBy ^
    "count by where clauses"       ! autoRollback().countBy ^
    "create new record"            ! autoRollback().create ^
    "save a record"                ! autoRollback().save ^
    "destroy a record"             ! autoRollback().destroy ^
                                   end

  case class autoRollback() extends AutoRollback {
    %syntaxObject%

    def findByPrimaryKeys = this {
      val maybeFound = %className%.find(%primaryKeys%)
      maybeFound.isDefined should beTrue
    }
    def findBy = this {
      val maybeFound = %className%.findBy(%whereExample%)
      maybeFound.isDefined should beTrue
    }
    def findAll = this {
      val allResults = %className%.findAll()
      allResults.size should be_>(0)
    }
    def countAll = this {
      val count = %className%.countAll()
      count should be_>(0L)
    }
    def findAllBy = this {
      val results = %className%.findAllBy(%whereExample%)
      results.size should be_>(0)
    }
    def countBy = this {
      val count = %className%.countBy(%whereExample%)
      count should be_>(0L)
    }
    def create = this {
      val created = %className%.create(%createFields%)
      created should not beNull
    }
    def save = this {
      val entity = %className%.findAll().head
      // TODO modify something
      val modified = entity
      val updated = %className%.save(modified)
      updated should not equalTo(entity)
    }
    def destroy = this {
      val entity = %className%.findAll().head
      %className%.destroy(entity)
      val shouldBeNone = %className%.find(%primaryKeys%)
      shouldBeNone.isDefined should beFalse
    }
  }

}
"""

_SPECS2_ACCEPTANCE_ASYNC: str = """\
package %package%

import scalikejdbc.specs2.AutoRollback
import org.specs2._
import scalikejdbc._

import scala.concurrent._
import scala.concurrent.duration._
%timeImport%

class %className%Spec extends Specification { def is =

  "The '%className%' model should" ^
    "find by primary keys"         ! autoRollback().findByPrimaryKeys ^
    "find by where clauses"        ! autoRollback().findBy ^
    "find all records"             ! autoRollback().findAll ^
    "count all records"            ! autoRollback().countAll ^
    "find all by where clauses"    ! autoRollback().findAllBy ^
    "count by where clauses"       ! autoRollback().countBy ^
    "create new record"            ! autoRollback().create ^
    "save a record"                ! autoRollback().save ^
    "destroy a record"             ! autoRollback().destroy ^
                                   end

  case class autoRollback() extends AutoRollback {
    %syntaxObject%

    def findByPrimaryKeys = this {
      val maybeFound = %className%.find(%primaryKeys%)
      maybeFound should beSome[%className%].await
    }
    def findBy = this {
      val maybeFound = %className%.findBy(%whereExample%)
      maybeFound should beSome[%className%].await
    }
    def findAll = this {
      val allResults = %className%.findAll()
      allResults.map(_.size) should be_>(0).await
    }
    def countAll = this {
      val count = %className%.countAll()
      count should be_>(0L).await
    }
    def findAllBy = this {
      val results = %className%.findAllBy(%whereExample%)
      results.map(_.size) should be_>(0).await
    }
    def countBy = this {
      val count = %className%.countBy(%whereExample%)
      count should be_>(0L).await
    }
    def create = this {
      val created = %className%.create(%createFields%)
      created should not (beNull.eventually)
    }
    def save = this {
      val entity = Await.result(%className%.findAll(), Duration.Inf).head
      // TODO modify something
      val modified = entity
      val updated = %className%.save(modified)
      updated should not (equalTo(entity).eventually)
    }
    def destroy = this {
      val entity = Await.result(%className%.findAll(), Duration.Inf).head
      Await.result(%className%.destroy(entity), Duration.Inf)
      val shouldBeNone = %className%.find(%primaryKeys%)
      shouldBeNone should beNone.await
    }
  }

}
"""

_SKELETONS: Dict[Tuple[TestTemplate, ExecutionMode], str] = {
    (TestTemplate.SCALATEST_FLAT_SPEC, ExecutionMode.SYNC): _FLAT_SPEC_SYNC,
    (TestTemplate.SCALATEST_FLAT_SPEC, ExecutionMode.ASYNC): _FLAT_SPEC_ASYNC,
    (TestTemplate.SPECS2_UNIT, ExecutionMode.SYNC): _SPECS2_UNIT_SYNC,
    (TestTemplate.SPECS2_UNIT, ExecutionMode.ASYNC): _SPECS2_UNIT_ASYNC,
    (TestTemplate.SPECS2_ACCEPTANCE, ExecutionMode.SYNC): _SPECS2_ACCEPTANCE_SYNC,
    (TestTemplate.SPECS2_ACCEPTANCE, ExecutionMode.ASYNC): _SPECS2_ACCEPTANCE_ASYNC,
}


def skeleton_for(template: TestTemplate, mode: ExecutionMode) -> Optional[str]:
    """Skeleton text, or None when no test spec is generated."""
    if template is TestTemplate.NONE:
        return None
    return _SKELETONS[(template, mode)]


__all__: List[str] = [
    "TIME_IMPORT_PLACEHOLDER",
    "PLACEHOLDERS",
    "skeleton_for",
]
