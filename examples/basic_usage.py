"""基本使用示例"""

import os

from basable import Basable, ConnectionConfig, Filter, FilterOperator, TableQueryOpts
from basable.db.types import TableExportFormat, TableExportOpts, UpdateTableData
from basable.graphs import CategoryGraphOpts
from basable.query import TableSearchOpts


def main():
    """主函数"""
    # 从环境变量获取连接信息
    password = os.getenv("BASABLE_DB_PASSWORD")
    db_name = os.getenv("BASABLE_DB_NAME")

    if password is None or not db_name:
        print("请设置环境变量 BASABLE_DB_PASSWORD 和 BASABLE_DB_NAME")
        return

    config = ConnectionConfig(
        username=os.getenv("BASABLE_DB_USER", "root"),
        password=password,
        host=os.getenv("BASABLE_DB_HOST", "localhost"),
        port=int(os.getenv("BASABLE_DB_PORT", "3306")),
        db_name=db_name,
    )

    # 建立连接并加载所有表
    print("初始化数据库连接...")
    basable = Basable()
    db = basable.create_connection(config, "example-user")
    basable.add_connection(db)

    print(f"\n数据库 {db_name} 中的所有表:")
    for summary in db.build_table_list():
        print(f"  - {summary.name}: {summary.row_count} 行, {summary.col_count} 列")

    table = db.get_table("users")
    if table is None:
        print("\n示例需要一张 users 表 (id, name, email, status)")
        return

    # 插入记录
    print("\n插入测试数据...")
    table.insert_data({"name": "张三", "email": "zhangsan@example.com", "status": "active"})
    table.insert_data({"name": "李四", "email": "lisi@example.com", "status": "inactive"})

    # 条件查询
    print("\n查询活跃用户:")
    opts = TableQueryOpts(
        table="users",
        columns=["id", "name", "email"],
        filters=[Filter.base("status", FilterOperator.eq("active"))],
        row_count=10,
    )
    for row in table.query_data(opts, db):
        print(f"  {row['id']} {row['name']} {row['email']}")
    print(f"共 {table.query_result_count(opts, db)} 条")

    # 全文搜索
    print("\n搜索 example.com:")
    search = TableQueryOpts(table="users", search_opts=TableSearchOpts(["email"], "example.com"))
    print(f"  找到 {len(table.query_data(search, db))} 条")

    # 批量更新
    ids = [str(row["id"]) for row in table.query_data(opts, db)]
    if ids:
        table.update_data(UpdateTableData(
            unique_key="id",
            columns=["status"],
            unique_values=ids,
            input=[{"status": "archived"} for _ in ids],
        ))
        print(f"\n已归档 {len(ids)} 条记录")

    # 分类统计
    print("\n按状态统计:")
    for point in db.category_graph(CategoryGraphOpts("users", "status")):
        print(f"  {point.y}: {point.x}")

    # 导出
    print("\n导出 CSV:")
    export = TableExportOpts(query_opts=TableQueryOpts(table="users"), format=TableExportFormat.CSV)
    print(table.export(export, db))

    basable.remove_connection(db.id, "example-user")


if __name__ == "__main__":
    main()
