"""initial almacen schema

Revision ID: 20261018_01
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261018_01'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def _movimiento_columns():
    return [
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('fecha', sa.Date(), nullable=False),
        sa.Column('codigo_producto', sa.String(length=50), nullable=False),
        sa.Column('descripcion', sa.String(length=255), nullable=False),
        sa.Column('precio_unitario', sa.Numeric(14, 2), nullable=False),
        sa.Column('cantidad', sa.Integer(), nullable=False),
        sa.Column('responsable', sa.String(length=150), nullable=True),
        sa.Column('area', sa.String(length=100), nullable=True),
        sa.Column('categoria', sa.String(length=100), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
    ]


def upgrade():
    op.create_table(
        'productos',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('codigo', sa.String(length=50), nullable=False),
        sa.Column('nombre', sa.String(length=200), nullable=False),
        sa.Column('costo_unitario', sa.Numeric(14, 2), nullable=False),
        sa.Column('ubicacion', sa.String(length=100), nullable=False),
        sa.Column('unidad_medida', sa.String(length=20), nullable=False),
        sa.Column('marca', sa.String(length=100), nullable=True),
        sa.Column('categoria', sa.String(length=100), nullable=True),
        sa.Column('stock_minimo', sa.Integer(), nullable=True),
        sa.Column('entradas', sa.Integer(), nullable=False),
        sa.Column('salidas', sa.Integer(), nullable=False),
        sa.Column('stock_actual', sa.Integer(), nullable=False),
        sa.Column('costo_total', sa.Numeric(14, 2), nullable=False),
        sa.Column('estado', sa.String(length=20), nullable=False),
        sa.Column('archivado_at', sa.DateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_productos_codigo', 'productos', ['codigo'])
    # Código único solo entre productos activos
    op.create_index(
        'uq_producto_codigo_activo',
        'productos',
        ['codigo'],
        unique=True,
        sqlite_where=sa.text('archivado_at IS NULL'),
        postgresql_where=sa.text('archivado_at IS NULL'),
    )

    op.create_table('movement_entries', *_movimiento_columns(), *_timestamps())
    op.create_table(
        'movement_exits',
        *_movimiento_columns(),
        sa.Column('proyecto', sa.String(length=150), nullable=True),
        *_timestamps(),
    )
    for tabla in ('movement_entries', 'movement_exits'):
        op.create_index(f'ix_{tabla}_fecha', tabla, ['fecha'])
        op.create_index(f'ix_{tabla}_codigo_producto', tabla, ['codigo_producto'])
        op.create_index(f'ix_{tabla}_deleted_at', tabla, ['deleted_at'])

    op.create_table(
        'equipment_reports',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('equipo', sa.String(length=200), nullable=False),
        sa.Column('serie_codigo', sa.String(length=50), nullable=False),
        sa.Column('cantidad', sa.Integer(), nullable=False),
        sa.Column('estado_equipo', sa.String(length=20), nullable=False),
        sa.Column('responsable', sa.String(length=150), nullable=False),
        sa.Column('fecha_salida', sa.Date(), nullable=False),
        sa.Column('hora_salida', sa.String(length=5), nullable=False),
        sa.Column('area_proyecto', sa.String(length=150), nullable=False),
        sa.Column('firma', sa.String(length=150), nullable=True),
        sa.Column('fecha_retorno', sa.Date(), nullable=True),
        sa.Column('hora_retorno', sa.String(length=5), nullable=True),
        sa.Column('estado_retorno', sa.String(length=20), nullable=True),
        sa.Column('responsable_retorno', sa.String(length=150), nullable=True),
        sa.Column('firma_retorno', sa.String(length=150), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_equipment_reports_serie_codigo', 'equipment_reports', ['serie_codigo'])

    op.create_table(
        'purchase_orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('codigo', sa.String(length=20), nullable=False),
        sa.Column('fecha', sa.Date(), nullable=False),
        sa.Column('cantidad', sa.Integer(), nullable=False),
        sa.Column('costo', sa.Numeric(14, 2), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_purchase_orders_codigo', 'purchase_orders', ['codigo'], unique=True)

    op.create_table(
        'purchase_order_products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('orden_id', sa.Integer(), sa.ForeignKey('purchase_orders.id'), nullable=False),
        sa.Column('fecha', sa.Date(), nullable=False),
        sa.Column('codigo', sa.String(length=50), nullable=False),
        sa.Column('nombre', sa.String(length=200), nullable=False),
        sa.Column('area', sa.String(length=100), nullable=True),
        sa.Column('proyecto', sa.String(length=150), nullable=True),
        sa.Column('responsable', sa.String(length=150), nullable=True),
        sa.Column('cantidad', sa.Integer(), nullable=False),
        sa.Column('costo_unitario', sa.Numeric(14, 2), nullable=False),
        sa.Column('subtotal', sa.Numeric(14, 2), nullable=False),
        sa.Column('descuenta_stock', sa.Boolean(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_purchase_order_products_orden_id', 'purchase_order_products', ['orden_id'])
    op.create_index('ix_purchase_order_products_codigo', 'purchase_order_products', ['codigo'])


def downgrade():
    op.drop_table('purchase_order_products')
    op.drop_table('purchase_orders')
    op.drop_table('equipment_reports')
    op.drop_table('movement_exits')
    op.drop_table('movement_entries')
    op.drop_index('uq_producto_codigo_activo', table_name='productos')
    op.drop_index('ix_productos_codigo', table_name='productos')
    op.drop_table('productos')
