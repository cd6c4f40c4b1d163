"""
Initial migration for NowStock models.
"""

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create NowStock models: Product, StockLevel, Movement, TagRead."""

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tenant_id', models.PositiveIntegerField(db_index=True, verbose_name='Empresa')),
                ('name', models.CharField(max_length=150, verbose_name='Nome')),
                ('rfid_tag', models.CharField(blank=True, help_text='EPC da etiqueta. Única por empresa.', max_length=64, null=True, verbose_name='Etiqueta RFID')),
                ('minimum_quantity', models.PositiveIntegerField(default=0, help_text='Estoque em falta quando o saldo chega a este valor', verbose_name='Quantidade Mínima')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Produto',
                'verbose_name_plural': 'Produtos',
                'ordering': ['name'],
                'constraints': [
                    models.UniqueConstraint(
                        condition=models.Q(('rfid_tag__isnull', False)),
                        fields=('tenant_id', 'rfid_tag'),
                        name='unique_rfid_tag_per_tenant',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockLevel',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tenant_id', models.PositiveIntegerField(verbose_name='Empresa')),
                ('quantity', models.PositiveIntegerField(default=0, verbose_name='Quantidade Atual')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_levels', to='nowstock.product', verbose_name='Produto')),
            ],
            options={
                'verbose_name': 'Saldo',
                'verbose_name_plural': 'Saldos',
                'constraints': [
                    models.UniqueConstraint(
                        fields=('tenant_id', 'product'),
                        name='unique_stock_level_per_tenant_product',
                    ),
                    models.CheckConstraint(
                        condition=models.Q(('quantity__gte', 0)),
                        name='stock_level_quantity_non_negative',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='Movement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tenant_id', models.PositiveIntegerField(verbose_name='Empresa')),
                ('kind', models.CharField(choices=[('entrada', 'Entrada'), ('saida', 'Saída'), ('devolucao', 'Devolução'), ('ajuste', 'Ajuste')], max_length=20, verbose_name='Tipo')),
                ('quantity', models.PositiveIntegerField(verbose_name='Quantidade')),
                ('delta', models.IntegerField(help_text='Positivo = entrada, Negativo = saída', verbose_name='Variação')),
                ('balance_after', models.PositiveIntegerField(verbose_name='Saldo após')),
                ('unit', models.CharField(default='unidade', max_length=20, verbose_name='Unidade')),
                ('justification', models.CharField(blank=True, max_length=255, null=True, verbose_name='Justificativa')),
                ('source', models.CharField(choices=[('rfid', 'Leitura RFID'), ('manual', 'Lançamento manual')], default='manual', max_length=10, verbose_name='Origem')),
                ('rfid_tag', models.CharField(blank=True, max_length=64, null=True, verbose_name='Etiqueta RFID')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Data/Hora')),
                ('actor', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Usuário')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='nowstock.product', verbose_name='Produto')),
            ],
            options={
                'verbose_name': 'Movimentação',
                'verbose_name_plural': 'Movimentações',
                'ordering': ['created_at', 'id'],
                'indexes': [
                    models.Index(fields=['tenant_id', 'product', 'created_at'], name='movement_tenant_product_idx'),
                    models.Index(fields=['tenant_id', 'created_at'], name='movement_tenant_created_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(('quantity__gt', 0)),
                        name='movement_quantity_positive',
                    ),
                    models.CheckConstraint(
                        condition=models.Q(('delta', models.F('quantity')), ('delta', -models.F('quantity')), _connector='OR'),
                        name='movement_delta_matches_quantity',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='TagRead',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tenant_id', models.PositiveIntegerField(verbose_name='Empresa')),
                ('rfid_tag', models.CharField(db_index=True, max_length=64, verbose_name='Etiqueta RFID')),
                ('kind', models.CharField(choices=[('entrada', 'Entrada'), ('saida', 'Saída'), ('devolucao', 'Devolução'), ('ajuste', 'Ajuste')], max_length=20, verbose_name='Ação')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Data/Hora')),
                ('actor', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Usuário')),
                ('movement', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='tag_read', to='nowstock.movement', verbose_name='Movimentação')),
            ],
            options={
                'verbose_name': 'Leitura RFID',
                'verbose_name_plural': 'Leituras RFID',
                'ordering': ['-created_at'],
            },
        ),
    ]
